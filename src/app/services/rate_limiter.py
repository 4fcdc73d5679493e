"""
Reset Rate Limiter

Counts earlier issuances for a subject inside a trailing window.
"""

from datetime import timedelta

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import SubjectKey


class ResetRateLimiter:
    """Read-only decision over the persisted token history"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def is_limited(self, subject: SubjectKey, window: timedelta, max_count: int) -> bool:
        """True when `max_count` or more tokens were issued within `window`"""
        async with self.uow:
            issued = await self.uow.nip_reset_tokens.count_issued_since(
                subject, utcnow() - window
            )
        return issued >= max_count
