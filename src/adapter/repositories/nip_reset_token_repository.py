from datetime import datetime
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.nip_reset_token_repository import (
    INipResetTokenRepository,
    TokenConflictError,
)
from src.domain.entities import NipResetToken, SubjectKey


class NipResetTokenRepository(INipResetTokenRepository):
    """NipResetToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: NipResetToken) -> NipResetToken:
        """Insert a new token"""
        self.session.add(token)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise TokenConflictError("reset token uniqueness violated") from exc
        await self.session.refresh(token)
        return token

    async def supersede_active(self, subject: SubjectKey, at: datetime) -> int:
        """Mark every unused token of the subject as used"""
        # Lock the subject's unused rows first so concurrent issuers queue here
        lock_stmt = (
            select(NipResetToken.id)
            .where(
                NipResetToken.customer_id == subject.customer_id,
                NipResetToken.vehicle_id == subject.vehicle_id,
                NipResetToken.used_at.is_(None),
            )
            .with_for_update()
        )
        await self.session.execute(lock_stmt)

        stmt = (
            update(NipResetToken)
            .where(
                NipResetToken.customer_id == subject.customer_id,
                NipResetToken.vehicle_id == subject.vehicle_id,
                NipResetToken.used_at.is_(None),
            )
            .values(used_at=at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count_issued_since(self, subject: SubjectKey, since: datetime) -> int:
        """Count tokens created for the subject since the given instant"""
        stmt = select(func.count(NipResetToken.id)).where(
            NipResetToken.customer_id == subject.customer_id,
            NipResetToken.vehicle_id == subject.vehicle_id,
            NipResetToken.created_at >= since,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def lock_active_by_hash(self, token_hash: str) -> Optional[NipResetToken]:
        """Get token by hash with SELECT ... FOR UPDATE"""
        stmt = (
            select(NipResetToken)
            .where(NipResetToken.token_hash == token_hash)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def read_by_hash(self, token_hash: str) -> Optional[NipResetToken]:
        """Get token by hash"""
        stmt = select(NipResetToken).where(NipResetToken.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_used(self, token_hash: str, at: datetime) -> bool:
        """Set used_at only where it is still NULL"""
        stmt = (
            update(NipResetToken)
            .where(
                NipResetToken.token_hash == token_hash,
                NipResetToken.used_at.is_(None),
            )
            .values(used_at=at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
