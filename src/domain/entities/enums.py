"""
NIP Reset Domain Enums
"""

from enum import Enum


class LookupStep(str, Enum):
    """Next step the client shows after a successful lookup"""

    confirm_single_vehicle = "confirmar_vehiculo_unico"
    select_vehicle = "seleccionar_vehiculo"


class TokenState(str, Enum):
    """Read-time classification of a reset token"""

    active = "active"
    used = "used"
    expired = "expired"
