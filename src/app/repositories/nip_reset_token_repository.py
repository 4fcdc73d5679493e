from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities import NipResetToken, SubjectKey


class TokenConflictError(Exception):
    """Insert rejected: subject already has an unused token, or the hash exists"""


class INipResetTokenRepository(ABC):
    """NipResetToken repository interface - application layer

    Expiry and used-state checks belong to the caller, the store only
    guarantees consistent reads and conditional writes.
    """

    @abstractmethod
    async def create(self, token: NipResetToken) -> NipResetToken:
        """Insert a new token, raises TokenConflictError on a uniqueness violation"""
        pass

    @abstractmethod
    async def supersede_active(self, subject: SubjectKey, at: datetime) -> int:
        """Mark every unused token of the subject as used, returns rows touched"""
        pass

    @abstractmethod
    async def count_issued_since(self, subject: SubjectKey, since: datetime) -> int:
        """Count tokens created for the subject at or after `since`"""
        pass

    @abstractmethod
    async def lock_active_by_hash(self, token_hash: str) -> Optional[NipResetToken]:
        """Get token by hash holding a row lock until the unit of work ends"""
        pass

    @abstractmethod
    async def read_by_hash(self, token_hash: str) -> Optional[NipResetToken]:
        """Get token by hash without locking"""
        pass

    @abstractmethod
    async def mark_used(self, token_hash: str, at: datetime) -> bool:
        """Set used_at if still unset, False when the token was already used"""
        pass
