"""
Reset Token Issuer

Generates reset secrets and persists their digest, keeping a single
unused token per subject.
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.app.repositories.nip_reset_token_repository import TokenConflictError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import CorrelationRef, NipResetToken, RequestContext, SubjectKey

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_token() -> str:
    """256-bit URL-safe secret"""
    return secrets.token_urlsafe(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 hex digest used as the lookup key"""
    return hashlib.sha256(token.encode()).hexdigest()


def clip(value: Optional[str], limit: int) -> Optional[str]:
    """Cut request/directory metadata to its column width"""
    return value[:limit] if value else value


class NipResetTokenIssuer:
    """
    Issues reset tokens.

    Business Rules:
    - Supersede and insert happen in one transaction
    - The partial unique index rejects a concurrent second insert for the
      same subject, the loser retries with a new secret after the winner commits
    - The plaintext secret is returned once and never persisted or logged
    """

    def __init__(self, uow: UnitOfWork, ttl: timedelta, max_attempts: int = 3):
        self.uow = uow
        self.ttl = ttl
        self.max_attempts = max_attempts

    async def issue(
        self,
        subject: SubjectKey,
        correlation: CorrelationRef,
        context: RequestContext,
    ) -> Result[str]:
        """
        Issue a new token for the subject.

        Returns:
            Result with the plaintext token, or Error TOKEN_ISSUE_FAILED when
            every attempt hit a uniqueness conflict
        """
        for attempt in range(1, self.max_attempts + 1):
            plain_token = generate_token()
            try:
                async with self.uow:
                    now = utcnow()
                    superseded = await self.uow.nip_reset_tokens.supersede_active(subject, now)

                    await self.uow.nip_reset_tokens.create(
                        NipResetToken(
                            customer_id=subject.customer_id,
                            vehicle_id=subject.vehicle_id,
                            token_hash=hash_token(plain_token),
                            request_ip=clip(context.ip, 64),
                            user_agent=clip(context.user_agent, 512),
                            vehicle_label=clip(context.vehicle_label, 255),
                            contact_record_id=clip(correlation.contact_record_id, 64),
                            vehicle_record_id=clip(correlation.vehicle_record_id, 64),
                            created_at=now,
                            expires_at=now + self.ttl,
                        )
                    )
                    await self.uow.commit()
            except TokenConflictError:
                logger.warning(
                    "Reset token conflict for customer=%s vehicle=%s (attempt %d/%d)",
                    subject.customer_id,
                    subject.vehicle_id,
                    attempt,
                    self.max_attempts,
                )
                continue

            logger.info(
                "Reset token issued for customer=%s vehicle=%s (superseded=%d)",
                subject.customer_id,
                subject.vehicle_id,
                superseded,
            )
            return Return.ok(plain_token)

        return Return.err(Error("TOKEN_ISSUE_FAILED", "Could not issue reset token"))

    async def invalidate(self, plain_token: str) -> bool:
        """Retire a token that was issued but could not be delivered"""
        async with self.uow:
            retired = await self.uow.nip_reset_tokens.mark_used(hash_token(plain_token), utcnow())
            await self.uow.commit()
        return retired
