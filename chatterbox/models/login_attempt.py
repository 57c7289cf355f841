from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String

from chatterbox.database import Base


class LoginAttemptEntry(Base):
    __tablename__ = "login_attempts"

    attempt_id = Column("attemptid", Integer, primary_key=True)
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_login_attempts_email_created_at", "email", "created_at"),
    )
