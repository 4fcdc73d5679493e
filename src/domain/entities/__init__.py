"""
NIP Reset Domain Entities

The persisted reset token plus the directory value objects it is built from.
"""

from .enums import LookupStep, TokenState
from .subject import (
    SubjectKey,
    DirectoryCustomer,
    DirectoryVehicle,
    DirectoryNotFound,
    SingleTarget,
    MultipleTargets,
    DirectoryLookup,
    RequestContext,
    CorrelationRef,
)
from .nip_reset_token import NipResetToken

__all__ = [
    # Enums
    "LookupStep",
    "TokenState",
    # Value objects
    "SubjectKey",
    "DirectoryCustomer",
    "DirectoryVehicle",
    "DirectoryNotFound",
    "SingleTarget",
    "MultipleTargets",
    "DirectoryLookup",
    "RequestContext",
    "CorrelationRef",
    # Entities
    "NipResetToken",
]
