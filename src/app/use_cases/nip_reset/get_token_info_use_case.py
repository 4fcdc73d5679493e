"""
Get Token Info Use Case

Read-only status of a reset link, used by the reset page before it asks
for the new NIP.
"""

from libs.result import Error, Result, Return
from src.app.services.token_issuer import hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from . import messages
from .dtos import TokenInfoResponse


class GetTokenInfoUseCase:
    """
    Business Rules:
    - Unknown, used and expired tokens give the same error
    - Never returns the token or its hash
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[TokenInfoResponse]:
        async with self.uow:
            reset_token = await self.uow.nip_reset_tokens.read_by_hash(hash_token(token or ""))

            if reset_token is None or not reset_token.is_active(utcnow()):
                return Return.err(
                    Error("INVALID_OR_EXPIRED_TOKEN", messages.INVALID_OR_EXPIRED_TOKEN)
                )

            return Return.ok(
                TokenInfoResponse(
                    cliente_id=reset_token.customer_id,
                    vehiculo_id=reset_token.vehicle_id,
                    apodo=reset_token.vehicle_label,
                )
            )
