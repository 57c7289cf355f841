"""Conversation prompts: per-language retrieval, grouping into sets, statistics."""

from dataclasses import dataclass, field
import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from chatterbox.database import session_scope
from chatterbox.errors import InvalidLanguage, StorageError
from chatterbox.models.prompt import PromptEntry, TranslationEntry

LOGGER = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "fr")
MAIN_PROMPT = "main"
FOLLOWUP_PROMPT = "followup"


@dataclass(frozen=True)
class PromptRow:
    prompt_id: int
    type: str
    prompt_set_id: int
    position: int
    text: str


@dataclass
class PromptSet:
    id: int
    main_prompt: str = ""
    followups: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LanguageCount:
    language_code: str
    count: int


@dataclass(frozen=True)
class PromptStatistics:
    total_prompts: int
    main_prompts: int
    followup_prompts: int
    total_translations: int
    prompt_sets: int
    supported_languages: tuple[str, ...]
    language_breakdown: list[LanguageCount]


@dataclass(frozen=True)
class ValidationReport:
    is_valid: bool
    issues: list[str]
    total_sets: int


def group_prompts_into_sets(rows: Iterable[PromptRow]) -> list[PromptSet]:
    """Fold prompt rows into sets ordered by set id.

    A followup at position ``n`` becomes the ``n``-th followup; gaps are
    closed up. Sets without a main prompt are dropped.
    """
    mains: dict[int, str] = {}
    followups: dict[int, dict[int, str]] = {}
    for row in rows:
        followups.setdefault(row.prompt_set_id, {})
        if row.type == MAIN_PROMPT:
            mains[row.prompt_set_id] = row.text
        elif row.type == FOLLOWUP_PROMPT and row.position >= 1:
            followups[row.prompt_set_id][row.position] = row.text

    prompt_sets = []
    for set_id in sorted(followups):
        main_prompt = mains.get(set_id, "")
        if not main_prompt:
            continue
        by_position = followups[set_id]
        prompt_sets.append(
            PromptSet(
                id=set_id,
                main_prompt=main_prompt,
                followups=[by_position[position] for position in sorted(by_position)],
            )
        )
    return prompt_sets


def validate_prompt_sets(prompt_sets: Sequence[PromptSet]) -> ValidationReport:
    issues = []
    for index, prompt_set in enumerate(prompt_sets):
        label = prompt_set.id or index + 1
        if not prompt_set.main_prompt or not prompt_set.main_prompt.strip():
            issues.append(f"set {label}: missing main prompt")
        if not prompt_set.followups:
            issues.append(f"set {label}: no followup prompts")
            continue
        for position, followup in enumerate(prompt_set.followups, start=1):
            if not followup or not followup.strip():
                issues.append(f"set {label}: empty followup {position}")
    return ValidationReport(
        is_valid=not issues, issues=issues, total_sets=len(prompt_sets)
    )


class PromptService:
    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        supported_languages: Sequence[str] = SUPPORTED_LANGUAGES,
    ) -> None:
        self._session_factory = session_factory
        self._supported_languages = tuple(supported_languages)

    @property
    def supported_languages(self) -> tuple[str, ...]:
        return self._supported_languages

    def is_language_supported(self, language: Optional[str]) -> bool:
        return language in self._supported_languages

    def ensure_language(self, language: Optional[str]) -> str:
        if not language:
            raise InvalidLanguage()
        if not self.is_language_supported(language):
            raise InvalidLanguage(
                "Unsupported language. Supported languages: "
                + ", ".join(self._supported_languages)
            )
        return language

    def get_prompts_by_language(self, language: Optional[str]) -> list[PromptSet]:
        language = self.ensure_language(language)
        query = (
            select(
                PromptEntry.prompt_id,
                PromptEntry.type,
                PromptEntry.prompt_set_id,
                PromptEntry.position,
                TranslationEntry.text,
            )
            .join(TranslationEntry, TranslationEntry.prompt_id == PromptEntry.prompt_id)
            .where(TranslationEntry.language_code == language)
            .order_by(PromptEntry.prompt_set_id, PromptEntry.position)
        )
        try:
            with session_scope(self._session_factory) as session:
                rows = [PromptRow(*row) for row in session.execute(query).all()]
        except SQLAlchemyError as exc:
            raise StorageError("fetching prompts") from exc
        prompt_sets = group_prompts_into_sets(rows)
        LOGGER.debug("Loaded %d prompt sets for %s", len(prompt_sets), language)
        return prompt_sets

    def get_statistics(self) -> PromptStatistics:
        try:
            with session_scope(self._session_factory) as session:
                by_type = dict(
                    session.execute(
                        select(PromptEntry.type, func.count()).group_by(PromptEntry.type)
                    ).all()
                )
                total_translations = session.execute(
                    select(func.count()).select_from(TranslationEntry)
                ).scalar_one()
                breakdown = [
                    LanguageCount(language_code=code, count=count)
                    for code, count in session.execute(
                        select(TranslationEntry.language_code, func.count())
                        .group_by(TranslationEntry.language_code)
                        .order_by(TranslationEntry.language_code)
                    ).all()
                ]
        except SQLAlchemyError as exc:
            raise StorageError("fetching prompt statistics") from exc

        main_prompts = by_type.get(MAIN_PROMPT, 0)
        return PromptStatistics(
            total_prompts=sum(by_type.values()),
            main_prompts=main_prompts,
            followup_prompts=by_type.get(FOLLOWUP_PROMPT, 0),
            total_translations=total_translations,
            # Each main prompt heads exactly one set.
            prompt_sets=main_prompts,
            supported_languages=self._supported_languages,
            language_breakdown=breakdown,
        )

    def validate(self, language: Optional[str] = None) -> dict[str, ValidationReport]:
        """Validate the stored sets for one language, or for every supported one."""
        languages = [self.ensure_language(language)] if language else self._supported_languages
        reports = {}
        for code in languages:
            report = validate_prompt_sets(self.get_prompts_by_language(code))
            if not report.is_valid:
                LOGGER.warning(
                    "Prompt validation found %d issues for %s", len(report.issues), code
                )
            reports[code] = report
        return reports
