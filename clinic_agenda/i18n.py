"""
Internationalization support

Spanish is the default; the dashboard consumes these strings verbatim.
"""

DEFAULT_LANGUAGE = 'es'

MESSAGES = {
    'es': {
        # Gap triage rationale
        'rationale_end_of_day': 'Hueco al final del día: intenta llenarlo o úsalo como tiempo interno/personal.',
        'rationale_fill_with_requests': 'Hay demanda cercana para ese horario. Prioridad: llenar sin tocar otras citas.',
        'rationale_recall_patients': 'No hay demanda inmediata, pero hay recall candidates.',
        'rationale_personal_time': 'Probabilidad baja de llenado: mejor tiempo personal/tareas internas.',
        'rationale_wait_or_reschedule': 'Sin señales claras: esperar o recall.',
        'rationale_open_end_of_day': 'Hueco al final del día. Recomiendo recall o adelantar para que no quede vacío.',
        'rationale_open_recall': 'Hueco aprovechable: recall/llenado.',
        'rationale_open_personal': 'Probabilidad baja: tiempo interno/personal.',

        # Next steps
        'step_confirm_requesters': 'Confirmar paciente(s) que solicitaron esa hora',
        'step_send_auto_confirmation': 'Enviar confirmación automática',
        'step_send_recall': 'Enviar recall a 3–5 pacientes',
        'step_prioritize_short': 'Priorizar tratamientos cortos',
        'step_block_personal': 'Bloquear tiempo interno/personal',
        'step_keep_alert': 'Mantener alerta',
        'step_wait': 'Esperar 30–60 min',
        'step_then_recall': 'Luego recall',
        'step_offer_short': 'Ofrecer tratamientos cortos',
        'step_use_alternative': 'Si no responde nadie, usar alternativa',

        # Alternatives
        'alt_recall_patients': 'Recall a pacientes',
        'alt_advance_appointments': 'Adelantar citas',
        'alt_internal_meeting': 'Reunión / tareas internas',
        'alt_personal_time': 'Tiempo personal',
        'alt_wait': 'Esperar 30–60 min',

        # Actions
        'gap_panel_title': 'Hueco prioritario {index} · {duration} min',
        'gap_panel_note': 'Panel IA hueco (sillón {chair})',
        'confirm_title': 'Confirmación automática para {patient}',

        # Agenda blocks
        'block_buffer': 'Buffer',
        'block_buffer_before': 'Antes de {type}',
        'block_buffer_after': 'Después de {type}',
        'block_lunch': 'Almuerzo',
        'block_lunch_note': 'Bloqueo automático',

        # Gap follow-up
        'state_contacting': 'Contactando automáticamente a pacientes con mayor probabilidad de aceptar este horario.',
        'state_switch_requested': 'Un paciente pidió cambiar su cita (switch) para encajar en este hueco.',
        'state_filled': 'Hueco llenado automáticamente. Se confirmó una cita (simulación).',
        'state_failed': 'No se logró confirmar a tiempo. Se recomienda ejecutar una alternativa.',
        'state_wait': 'Se mantiene el hueco bajo monitoreo. Fyllio seguirá intentando y te avisará.',
        'state_recall': 'Ejecutando recall automático (simulación) para intentar llenar el hueco.',
        'state_personal': 'Hueco reservado como tiempo personal.',
        'state_advance': 'Intentando adelantar citas (simulación).',
        'state_internal': 'Hueco reservado para tareas internas / reunión del equipo.',

        # Week summary
        'week_summary': '{name} creó una semana realista: 6 días + huecos + confirmaciones.',
        'insight_chairs': 'Semana real (Lun–Sáb) creada desde cero por sillón (sillones: {chairs}).',
        'insight_treatments': 'Tratamientos activos: {count}.',
        'insight_seed': 'Seed usado: {seed}.',
        'insight_snapping': '✅ Scheduler anti-solape: ceil/floor (no hay redondeos hacia atrás).',
        'insight_days': 'Días: {days}',
        'insight_lunch': 'Almuerzo activo: {start}–{end} (no se agenda dentro).',
        'insight_utilization': 'Ocupación media: {pct}% ({gaps} huecos priorizados).',
    },
    'en': {
        'rationale_end_of_day': 'End-of-day gap: try to fill it or use it as internal/personal time.',
        'rationale_fill_with_requests': 'There is nearby demand for this slot. Priority: fill it without moving other appointments.',
        'rationale_recall_patients': 'No immediate demand, but there are recall candidates.',
        'rationale_personal_time': 'Low fill probability: better used as personal time or internal tasks.',
        'rationale_wait_or_reschedule': 'No clear signals: wait or recall.',
        'rationale_open_end_of_day': 'End-of-day gap. Recall or bring appointments forward so it does not stay empty.',
        'rationale_open_recall': 'Usable gap: recall/fill.',
        'rationale_open_personal': 'Low probability: internal/personal time.',

        'step_confirm_requesters': 'Confirm the patient(s) who asked for this time',
        'step_send_auto_confirmation': 'Send automatic confirmation',
        'step_send_recall': 'Send recall to 3–5 patients',
        'step_prioritize_short': 'Prioritize short treatments',
        'step_block_personal': 'Block internal/personal time',
        'step_keep_alert': 'Keep monitoring',
        'step_wait': 'Wait 30–60 min',
        'step_then_recall': 'Then recall',
        'step_offer_short': 'Offer short treatments',
        'step_use_alternative': 'If nobody answers, use an alternative',

        'alt_recall_patients': 'Recall patients',
        'alt_advance_appointments': 'Bring appointments forward',
        'alt_internal_meeting': 'Meeting / internal tasks',
        'alt_personal_time': 'Personal time',
        'alt_wait': 'Wait 30–60 min',

        'gap_panel_title': 'Priority gap {index} · {duration} min',
        'gap_panel_note': 'AI gap panel (chair {chair})',
        'confirm_title': 'Automatic confirmation for {patient}',

        'block_buffer': 'Buffer',
        'block_buffer_before': 'Before {type}',
        'block_buffer_after': 'After {type}',
        'block_lunch': 'Lunch',
        'block_lunch_note': 'Automatic block',

        'state_contacting': 'Automatically contacting the patients most likely to accept this slot.',
        'state_switch_requested': 'A patient asked to switch their appointment into this gap.',
        'state_filled': 'Gap filled automatically. An appointment was confirmed (simulation).',
        'state_failed': 'Could not confirm in time. Running an alternative is recommended.',
        'state_wait': 'The gap stays under watch. Fyllio will keep trying and let you know.',
        'state_recall': 'Running automatic recall (simulation) to try to fill the gap.',
        'state_personal': 'Gap reserved as personal time.',
        'state_advance': 'Trying to bring appointments forward (simulation).',
        'state_internal': 'Gap reserved for internal tasks / team meeting.',

        'week_summary': '{name} built a realistic week: 6 days + gaps + confirmations.',
        'insight_chairs': 'Real week (Mon–Sat) built from scratch per chair (chairs: {chairs}).',
        'insight_treatments': 'Active treatments: {count}.',
        'insight_seed': 'Seed used: {seed}.',
        'insight_snapping': '✅ Anti-overlap scheduler: ceil/floor (no backward rounding).',
        'insight_days': 'Days: {days}',
        'insight_lunch': 'Lunch active: {start}–{end} (nothing booked inside).',
        'insight_utilization': 'Average occupancy: {pct}% ({gaps} prioritized gaps).',
    },
}


def get_message(key: str, lang: str = DEFAULT_LANGUAGE, **params) -> str:
    """
    Get localized message

    Args:
        key: Message key
        lang: Language code; unknown languages fall back to Spanish
        **params: Values interpolated into the template

    Returns:
        Localized message, or the key itself when it is unknown
    """
    catalog = MESSAGES.get(lang) or MESSAGES[DEFAULT_LANGUAGE]
    template = catalog.get(key, key)
    return template.format(**params) if params else template


def supported_language(lang) -> str:
    return lang if isinstance(lang, str) and lang in MESSAGES else DEFAULT_LANGUAGE
