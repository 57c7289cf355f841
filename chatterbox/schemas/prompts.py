from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from chatterbox.schemas.auth import CamelModel


class PromptSetResponse(BaseModel):
    # Snake-case keys are what the mobile client reads.
    id: int
    main_prompt: str
    followups: list[str]


class LanguageCountResponse(CamelModel):
    language_code: str
    count: int


class PromptStatisticsResponse(CamelModel):
    total_prompts: int
    main_prompts: int
    followup_prompts: int
    total_translations: int
    prompt_sets: int
    supported_languages: list[str]
    language_breakdown: list[LanguageCountResponse]


class PromptStatisticsEnvelope(CamelModel):
    success: bool = True
    data: PromptStatisticsResponse
    timestamp: datetime


class ValidatePromptsRequest(CamelModel):
    language: Optional[str] = None


class ValidationReportResponse(CamelModel):
    is_valid: bool
    issues: list[str]
    total_sets: int


class ValidatePromptsResponse(CamelModel):
    success: bool = True
    validation: dict[str, ValidationReportResponse]
    timestamp: datetime
