"""
Send Reset Link Use Case

Re-validates the customer/vehicle pairing, applies the per-subject rate
limit, issues a reset token and delivers the link by email.
"""

import logging
from datetime import timedelta
from urllib.parse import urlencode

from libs.result import Error, Result, Return
from src.app.services.identity_directory import DirectoryUnavailableError, IIdentityDirectory
from src.app.services.rate_limiter import ResetRateLimiter
from src.app.services.reset_link_sender import IResetLinkSender
from src.app.services.token_issuer import NipResetTokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    CorrelationRef,
    DirectoryNotFound,
    RequestContext,
    SubjectKey,
)
from . import messages
from .dtos import SendResetLinkCommand, SendResetLinkResponse
from .normalize import normalize_email, normalize_phone

logger = logging.getLogger(__name__)


class SendResetLinkUseCase:
    """
    Use case for issuing a reset link.

    Business Rules:
    - The (customer, vehicle) pair must still belong to the email + phone
    - At most `rate_limit_max` issuances per subject within `rate_limit_window`
    - A new token supersedes any unused token for the same subject
    - The link goes to the email registered in the directory
    - If the email cannot be sent the new token is retired immediately
    """

    def __init__(
        self,
        uow: UnitOfWork,
        directory: IIdentityDirectory,
        sender: IResetLinkSender,
        reset_url_base: str,
        token_ttl: timedelta = timedelta(minutes=30),
        rate_limit_window: timedelta = timedelta(minutes=60),
        rate_limit_max: int = 2,
        issue_max_attempts: int = 3,
    ):
        self.uow = uow
        self.directory = directory
        self.sender = sender
        self.reset_url_base = reset_url_base
        self.rate_limit_window = rate_limit_window
        self.rate_limit_max = rate_limit_max
        self.rate_limiter = ResetRateLimiter(uow)
        self.issuer = NipResetTokenIssuer(uow, ttl=token_ttl, max_attempts=issue_max_attempts)

    def _reset_url(self, plain_token: str) -> str:
        separator = "&" if "?" in self.reset_url_base else "?"
        return f"{self.reset_url_base}{separator}{urlencode({'token': plain_token})}"

    async def execute(self, command: SendResetLinkCommand) -> Result[SendResetLinkResponse]:
        """
        Execute send reset link use case.

        Errors:
            - INVALID_REQUEST: missing email/phone/ids
            - NOT_FOUND: pairing not confirmed by the directory
            - RATE_LIMITED: too many links for this vehicle recently
            - DEPENDENCY_UNAVAILABLE: directory unreachable
            - TOKEN_ISSUE_FAILED / LINK_DELIVERY_FAILED: internal failures
        """
        email = normalize_email(command.email)
        phone = normalize_phone(command.phone)
        if not (email and phone and command.customer_id and command.vehicle_id):
            return Return.err(Error("INVALID_REQUEST", messages.INVALID_REQUEST))

        try:
            lookup = await self.directory.resolve(email, phone)
        except DirectoryUnavailableError:
            logger.error("Identity directory unavailable during send-link")
            return Return.err(Error("DEPENDENCY_UNAVAILABLE", messages.DEPENDENCY_UNAVAILABLE))

        if isinstance(lookup, DirectoryNotFound) or lookup.customer.customer_id != command.customer_id:
            return Return.err(Error("NOT_FOUND", messages.NOT_FOUND))

        vehicle = next(
            (v for v in lookup.vehicles if v.vehicle_id == command.vehicle_id), None
        )
        if vehicle is None:
            return Return.err(Error("NOT_FOUND", messages.NOT_FOUND))

        subject = SubjectKey(customer_id=command.customer_id, vehicle_id=command.vehicle_id)

        if await self.rate_limiter.is_limited(subject, self.rate_limit_window, self.rate_limit_max):
            logger.warning(
                "Reset link rate limited for customer=%s vehicle=%s",
                subject.customer_id,
                subject.vehicle_id,
            )
            return Return.err(Error("RATE_LIMITED", messages.RATE_LIMITED))

        issued = await self.issuer.issue(
            subject,
            CorrelationRef(
                contact_record_id=lookup.customer.contact_record_id,
                vehicle_record_id=vehicle.record_id,
            ),
            RequestContext(
                ip=command.request_ip,
                user_agent=command.user_agent,
                vehicle_label=vehicle.label,
            ),
        )
        if issued.is_err():
            return Return.err(issued.error)

        plain_token = issued.value
        sent = await self.sender.send(lookup.customer.email, self._reset_url(plain_token), vehicle.label)
        if not sent:
            await self.issuer.invalidate(plain_token)
            logger.error(
                "Reset link delivery failed for customer=%s vehicle=%s, token retired",
                subject.customer_id,
                subject.vehicle_id,
            )
            return Return.err(Error("LINK_DELIVERY_FAILED", "Reset link could not be delivered"))

        return Return.ok(SendResetLinkResponse(message=messages.LINK_SENT))
