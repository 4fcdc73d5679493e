"""
Confirm NIP Reset Use Case

Validates a reset token and hands the new NIP to the system of record
through the signed finalization webhook.
"""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from libs.result import Error, Result, Return
from src.app.services.finalization_notifier import FinalizationPayload, IFinalizationNotifier
from src.app.services.token_issuer import hash_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from . import messages
from .dtos import ConfirmNipResetResponse
from .normalize import is_valid_nip

logger = logging.getLogger(__name__)


class ConfirmNipResetUseCase:
    """
    Use case for confirming a NIP reset.

    Business Rules:
    - NIP and confirmation must match and be exactly 4 digits, checked
      before any token lookup
    - Unknown, used and expired tokens give the same error
    - The token row stays locked while the webhook runs, so a token can only
      be finalized once even if the receiver is slow
    - Webhook failure rolls back: the token stays active and can be retried
    - Token is marked as used only after the receiver acknowledged
    """

    def __init__(self, uow: UnitOfWork, notifier: IFinalizationNotifier):
        self.uow = uow
        self.notifier = notifier

    async def execute(
        self, token: str, new_nip: str, new_nip_confirmation: str
    ) -> Result[ConfirmNipResetResponse]:
        """
        Execute confirm NIP reset use case.

        Args:
            token: Reset token (plain text from the emailed link)
            new_nip: New 4-digit NIP
            new_nip_confirmation: Repeated NIP

        Errors:
            - NIP_MISMATCH / INVALID_NIP: malformed request, nothing touched
            - INVALID_OR_EXPIRED_TOKEN: token unknown, used or expired
            - DEPENDENCY_UNAVAILABLE: webhook failed after retries
        """
        if new_nip != new_nip_confirmation:
            return Return.err(Error("NIP_MISMATCH", messages.NIP_MISMATCH))

        if not is_valid_nip(new_nip):
            return Return.err(Error("INVALID_NIP", messages.INVALID_NIP))

        token_hash = hash_token(token or "")

        async with self.uow:
            reset_token = await self.uow.nip_reset_tokens.lock_active_by_hash(token_hash)

            if reset_token is None or not reset_token.is_active(utcnow()):
                return Return.err(
                    Error("INVALID_OR_EXPIRED_TOKEN", messages.INVALID_OR_EXPIRED_TOKEN)
                )

            payload = FinalizationPayload(
                request_id=str(uuid4()),
                timestamp=datetime.now(timezone.utc).isoformat(),
                cliente_id=reset_token.customer_id,
                vehiculo_id=reset_token.vehicle_id,
                vehiculo_apodo=reset_token.vehicle_label,
                contacto_record_id=reset_token.contact_record_id,
                vehiculo_record_id=reset_token.vehicle_record_id,
                nip_nuevo=new_nip,
            )

            # Row lock is held across the call, bounded by the notifier timeout
            if not await self.notifier.deliver(payload):
                logger.error(
                    "Finalization webhook failed for customer=%s vehicle=%s request_id=%s",
                    reset_token.customer_id,
                    reset_token.vehicle_id,
                    payload.request_id,
                )
                return Return.err(
                    Error("DEPENDENCY_UNAVAILABLE", messages.DEPENDENCY_UNAVAILABLE)
                )

            if not await self.uow.nip_reset_tokens.mark_used(token_hash, utcnow()):
                return Return.err(
                    Error("INVALID_OR_EXPIRED_TOKEN", messages.INVALID_OR_EXPIRED_TOKEN)
                )

            await self.uow.commit()

            logger.info(
                "NIP reset confirmed for customer=%s vehicle=%s request_id=%s",
                payload.cliente_id,
                payload.vehiculo_id,
                payload.request_id,
            )

        return Return.ok(ConfirmNipResetResponse(message=messages.NIP_UPDATED))
