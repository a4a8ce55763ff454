from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmitRequest(BaseModel):
    """Raw submission body; clamping and sanitizing happen in ``core.sanitize``"""
    model_config = ConfigDict(extra='ignore')

    trackId: Optional[Any] = Field(None, description='Track identifier (required)')
    difficulty: Optional[Any] = Field('normal', description='easy | normal | hard')
    name: Optional[Any] = Field(None, description='Display name, trimmed to 16 characters')
    score: Optional[Any] = Field(0, description='Non-negative score')
    acc: Optional[Any] = Field(0, description='Accuracy fraction 0..1')
    combo: Optional[Any] = Field(0, description='Max combo')
