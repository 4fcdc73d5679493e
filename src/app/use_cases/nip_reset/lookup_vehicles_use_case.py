"""
Lookup Vehicles Use Case

Resolves the customer behind an email + phone pair and lists the
vehicles whose NIP can be reset.
"""

import logging

from libs.result import Error, Result, Return
from src.app.services.identity_directory import DirectoryUnavailableError, IIdentityDirectory
from src.domain.entities import DirectoryNotFound, LookupStep, MultipleTargets, SingleTarget
from . import messages
from .dtos import LookupResponse, VehicleInfo
from .normalize import normalize_email, normalize_phone

logger = logging.getLogger(__name__)


class LookupVehiclesUseCase:
    """
    Use case for the first step of the reset flow.

    Business Rules:
    - Unknown customer and customer without eligible vehicles look the same
    - One vehicle: client asks for confirmation
    - Several vehicles: client asks the customer to pick one
    """

    def __init__(self, directory: IIdentityDirectory):
        self.directory = directory

    async def execute(self, email: str, phone: str) -> Result[LookupResponse]:
        email = normalize_email(email)
        phone = normalize_phone(phone)
        if not email or not phone:
            return Return.err(Error("INVALID_REQUEST", messages.INVALID_REQUEST))

        try:
            lookup = await self.directory.resolve(email, phone)
        except DirectoryUnavailableError:
            logger.error("Identity directory unavailable during lookup")
            return Return.err(Error("DEPENDENCY_UNAVAILABLE", messages.DEPENDENCY_UNAVAILABLE))

        if isinstance(lookup, DirectoryNotFound):
            return Return.err(Error("NOT_FOUND", messages.NOT_FOUND))

        if isinstance(lookup, SingleTarget):
            step = LookupStep.confirm_single_vehicle
        elif isinstance(lookup, MultipleTargets):
            step = LookupStep.select_vehicle
        else:
            raise TypeError(f"Unexpected directory outcome: {type(lookup).__name__}")

        return Return.ok(
            LookupResponse(
                step=step.value,
                cliente_id=lookup.customer.customer_id,
                vehiculos=[
                    VehicleInfo(vehiculo_id=v.vehicle_id, apodo=v.label)
                    for v in lookup.vehicles
                ],
            )
        )
