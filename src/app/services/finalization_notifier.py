from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

FINALIZATION_EVENT = "nip.reset.confirmed"


class FinalizationPayload(BaseModel):
    """Event handed to the system of record that persists the new NIP.

    request_id is fresh per confirmation, receivers use it as idempotency key.
    """

    evento: str = FINALIZATION_EVENT
    request_id: str
    timestamp: str
    cliente_id: str
    vehiculo_id: str
    vehiculo_apodo: Optional[str] = None
    contacto_record_id: Optional[str] = None
    vehiculo_record_id: Optional[str] = None
    nip_nuevo: str

    def __repr__(self) -> str:
        return f"FinalizationPayload(evento={self.evento!r}, request_id={self.request_id!r})"

    __str__ = __repr__


class IFinalizationNotifier(ABC):
    """Signed handoff of a confirmed reset to the external system of record"""

    @abstractmethod
    async def deliver(self, payload: FinalizationPayload) -> bool:
        """True once the receiver acknowledged, False after exhausting retries"""
        pass
