from abc import ABC, abstractmethod

from src.domain.entities import DirectoryLookup


class DirectoryUnavailableError(Exception):
    """Identity directory could not be reached or answered with an error"""


class IIdentityDirectory(ABC):
    """Read-only customer/vehicle catalog keyed by email + phone"""

    @abstractmethod
    async def resolve(self, email: str, phone: str) -> DirectoryLookup:
        """
        Resolve a customer and their eligible vehicles.

        Returns:
            DirectoryNotFound, SingleTarget or MultipleTargets

        Raises:
            DirectoryUnavailableError: transport failure or server error
        """
        pass
