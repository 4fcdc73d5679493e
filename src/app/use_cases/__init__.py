"""
Use Cases

- nip_reset/: vehicle NIP reset flow
"""

from .nip_reset import (
    LookupVehiclesUseCase,
    SendResetLinkUseCase,
    GetTokenInfoUseCase,
    ConfirmNipResetUseCase,
)

__all__ = [
    "LookupVehiclesUseCase",
    "SendResetLinkUseCase",
    "GetTokenInfoUseCase",
    "ConfirmNipResetUseCase",
]
