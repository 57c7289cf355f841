import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query

from chatterbox.dependencies import (
    api_rate_limit,
    get_current_claims,
    get_prompt_service,
    prompts_rate_limit,
)
from chatterbox.schemas.prompts import (
    PromptSetResponse,
    PromptStatisticsEnvelope,
    PromptStatisticsResponse,
    ValidatePromptsRequest,
    ValidatePromptsResponse,
    ValidationReportResponse,
)
from chatterbox.services.prompts import PromptService
from chatterbox.services.tokens import TokenClaims
from chatterbox.utils import utcnow

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.get(
    "",
    response_model=list[PromptSetResponse],
    dependencies=[Depends(prompts_rate_limit)],
)
def get_prompts(
    language: Optional[str] = Query(default=None),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> list[PromptSetResponse]:
    prompt_sets = prompt_service.get_prompts_by_language(language)
    return [PromptSetResponse(**asdict(prompt_set)) for prompt_set in prompt_sets]


@router.get(
    "/stats",
    response_model=PromptStatisticsEnvelope,
    dependencies=[Depends(api_rate_limit)],
)
def get_prompt_statistics(
    claims: TokenClaims = Depends(get_current_claims),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> PromptStatisticsEnvelope:
    LOGGER.info("Prompt statistics requested by account %s", claims.account_id)
    statistics = prompt_service.get_statistics()
    return PromptStatisticsEnvelope(
        data=PromptStatisticsResponse(**asdict(statistics)),
        timestamp=utcnow(),
    )


@router.post(
    "/validate",
    response_model=ValidatePromptsResponse,
    dependencies=[Depends(api_rate_limit)],
)
def validate_prompts(
    payload: Optional[ValidatePromptsRequest] = None,
    claims: TokenClaims = Depends(get_current_claims),
    prompt_service: PromptService = Depends(get_prompt_service),
) -> ValidatePromptsResponse:
    language = payload.language if payload else None
    LOGGER.info(
        "Prompt validation for %s requested by account %s",
        language or "all languages",
        claims.account_id,
    )
    reports = prompt_service.validate(language)
    return ValidatePromptsResponse(
        validation={
            code: ValidationReportResponse(**asdict(report))
            for code, report in reports.items()
        },
        timestamp=utcnow(),
    )
