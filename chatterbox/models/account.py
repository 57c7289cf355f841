from sqlalchemy import Boolean, Column, DateTime, Integer, String

from chatterbox.database import Base


class AccountEntry(Base):
    __tablename__ = "accounts"

    account_id = Column("accountid", Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
