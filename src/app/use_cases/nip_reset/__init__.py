"""
NIP Reset Use Cases

Lookup, link issuance, link status and confirmation.
"""

from .lookup_vehicles_use_case import LookupVehiclesUseCase
from .send_reset_link_use_case import SendResetLinkUseCase
from .get_token_info_use_case import GetTokenInfoUseCase
from .confirm_nip_reset_use_case import ConfirmNipResetUseCase
from .dtos import (
    SendResetLinkCommand,
    VehicleInfo,
    LookupResponse,
    SendResetLinkResponse,
    TokenInfoResponse,
    ConfirmNipResetResponse,
)

__all__ = [
    # Use Cases
    "LookupVehiclesUseCase",
    "SendResetLinkUseCase",
    "GetTokenInfoUseCase",
    "ConfirmNipResetUseCase",
    # DTOs - Commands
    "SendResetLinkCommand",
    # DTOs - Responses
    "LookupResponse",
    "SendResetLinkResponse",
    "TokenInfoResponse",
    "ConfirmNipResetResponse",
    # DTOs - Nested Models
    "VehicleInfo",
]
