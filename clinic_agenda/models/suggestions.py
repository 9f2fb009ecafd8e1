"""
Pydantic models for the AI suggestions API.

Fields are deliberately loose: the rules normalizer and the week planner
recover from missing or mistyped values, so the boundary only insists on
a JSON object.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AiSuggestionsRequest(BaseModel):
    """Request body for a generated week."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rules: Optional[Any] = Field(default=None, description="Partial clinic scheduling rules")
    seed: Optional[Any] = Field(default=None, description="Numeric seed; defaults to current epoch millis")
    provider_id: Optional[Any] = Field(default=None, alias="providerId", description="Provider stamped on appointments")
    anchor_day_iso: Optional[Any] = Field(default=None, alias="anchorDayIso", description="Any day of the target week")
    day_iso: Optional[Any] = Field(default=None, alias="dayIso", description="Fallback anchor (YYYY-MM-DD)")
    language: Optional[Any] = Field(default=None, description="Language for generated texts (es, en)")
