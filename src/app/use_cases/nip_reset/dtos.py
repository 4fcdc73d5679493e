"""
NIP Reset Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the reset flow.
Field names are the JSON contract consumed by the frontend.
"""

from typing import List, Optional
from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class SendResetLinkCommand(BaseModel):
    """Request to issue and deliver a reset link for one vehicle"""

    email: str
    phone: str
    customer_id: str
    vehicle_id: str
    request_ip: Optional[str] = None
    user_agent: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class VehicleInfo(BaseModel):
    """Vehicle shown to the customer in the lookup step"""

    vehiculo_id: str
    apodo: str


class LookupResponse(BaseModel):
    """Response for vehicle lookup use case"""

    step: str
    cliente_id: str
    vehiculos: List[VehicleInfo]


class SendResetLinkResponse(BaseModel):
    """Response for send reset link use case"""

    message: str


class TokenInfoResponse(BaseModel):
    """Response for token info use case"""

    cliente_id: str
    vehiculo_id: str
    apodo: Optional[str] = None


class ConfirmNipResetResponse(BaseModel):
    """Response for confirm NIP reset use case"""

    message: str
