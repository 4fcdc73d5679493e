from abc import ABC, abstractmethod


class IResetLinkSender(ABC):
    """Out-of-band channel delivering the reset link to the customer"""

    @abstractmethod
    async def send(self, to_email: str, reset_url: str, vehicle_label: str) -> bool:
        """Deliver the link, False on any failure (never raises)"""
        pass
