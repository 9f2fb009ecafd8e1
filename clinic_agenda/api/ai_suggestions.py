"""
AI Suggestions API
Generates a synthetic clinic week with prioritized gap panels.

The heavy lifting lives in ``services.agenda``; this module only maps the
request onto ``plan_week`` and serialises the result.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from ..config import AgendaSettings, get_settings
from ..i18n import supported_language
from ..models.suggestions import AiSuggestionsRequest
from ..services.agenda.week_planner import plan_week, resolve_anchor_day, resolve_seed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai-suggestions"])


@router.post("/ai-suggestions")
def create_ai_suggestions(
    request: AiSuggestionsRequest,
    settings: AgendaSettings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Generate a Monday-Saturday week, its gaps and suggested actions.

    ## Request
    - **rules**: partial scheduling rules (camelCase keys)
    - **seed**: numeric seed (default: current epoch millis)
    - **providerId**: optional provider id
    - **anchorDayIso** / **dayIso**: any day in the target week
    - **language**: `es` (default) or `en`

    ## Response
    `{summary, stressLevel, insights, appointments, actions, metrics}`
    """
    seed = resolve_seed(request.seed)
    anchor = resolve_anchor_day(request.anchor_day_iso, request.day_iso, settings.AGENDA_DEFAULT_DAY)
    provider_id = request.provider_id if isinstance(request.provider_id, str) else None
    lang = supported_language(request.language or settings.AGENDA_LANGUAGE)

    try:
        result = plan_week(
            request.rules,
            seed,
            anchor,
            provider_id=provider_id,
            lang=lang,
            summary_name=settings.AGENDA_SUMMARY_NAME,
        )
    except Exception as e:
        logger.exception(f"Week generation failed for anchor {anchor.isoformat()} seed={seed}: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate agenda suggestions")

    return result.to_dict()
