"""
NipResetToken Entity

Single-use, time-boxed credential-reset tokens scoped to a customer + vehicle.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import TokenState
from .subject import SubjectKey


class NipResetToken(SQLModel, table=True):
    """
    NipResetToken entity - reset link credential for one vehicle NIP.

    Business Rules:
    - Token is SHA-256 hash of a secure random string, the raw secret is never stored
    - At most one unused row per (customer_id, vehicle_id), enforced by a
      partial unique index; issuance supersedes prior rows first
    - used_at set means no longer usable (confirmed or superseded), never cleared
    - Expiry is evaluated at read time against expires_at
    """

    __tablename__ = "nip_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Subject key
    customer_id: str = Field(max_length=64)
    vehicle_id: str = Field(max_length=64)

    token_hash: str = Field(unique=True, max_length=64)  # SHA-256 output

    # Request context
    request_ip: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    vehicle_label: Optional[str] = Field(default=None, max_length=255)

    # Directory records referenced by the finalization payload
    contact_record_id: Optional[str] = Field(default=None, max_length=64)
    vehicle_record_id: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "idx_nip_reset_tokens_customer_vehicle_created_at",
            "customer_id",
            "vehicle_id",
            "created_at",
        ),
        Index(
            "uq_nip_reset_tokens_unused_subject",
            "customer_id",
            "vehicle_id",
            unique=True,
            postgresql_where=text("used_at IS NULL"),
            sqlite_where=text("used_at IS NULL"),
        ),
    )

    @property
    def subject_key(self) -> SubjectKey:
        return SubjectKey(customer_id=self.customer_id, vehicle_id=self.vehicle_id)

    def state(self, now: datetime) -> TokenState:
        if self.used_at is not None:
            return TokenState.used
        if self.expires_at <= now:
            return TokenState.expired
        return TokenState.active

    def is_active(self, now: datetime) -> bool:
        return self.state(now) == TokenState.active
