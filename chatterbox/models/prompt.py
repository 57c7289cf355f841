from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from chatterbox.database import Base
from chatterbox.utils import utcnow


class PromptEntry(Base):
    """One prompt of a conversation set. Position 0 is the main prompt."""

    __tablename__ = "prompts"

    prompt_id = Column("promptid", Integer, primary_key=True)
    type = Column(String(16), nullable=False)
    prompt_set_id = Column(Integer, nullable=False, index=True)
    position = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("type in ('main', 'followup')", name="ck_prompts_type"),
        CheckConstraint("position >= 0", name="ck_prompts_position_non_negative"),
        UniqueConstraint("prompt_set_id", "position", name="uq_prompts_set_position"),
    )


class TranslationEntry(Base):
    __tablename__ = "translations"

    translation_id = Column("translationid", Integer, primary_key=True)
    prompt_id = Column(
        "promptid", Integer, ForeignKey("prompts.promptid"), nullable=False, index=True
    )
    language_code = Column(String(8), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "language_code in ('en', 'fr')", name="ck_translations_language_code"
        ),
        UniqueConstraint("promptid", "language_code", name="uq_translations_prompt_language"),
    )
