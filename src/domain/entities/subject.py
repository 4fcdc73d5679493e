"""
Subject key and directory records.

Value objects only, nothing here is persisted by this service.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict


class SubjectKey(BaseModel):
    """Customer + vehicle pair a reset token is scoped to"""

    model_config = ConfigDict(frozen=True)

    customer_id: str
    vehicle_id: str


class DirectoryCustomer(BaseModel):
    """Customer as known by the identity directory"""

    customer_id: str
    contact_record_id: Optional[str] = None
    email: str


class DirectoryVehicle(BaseModel):
    """Eligible vehicle as known by the identity directory"""

    vehicle_id: str
    record_id: Optional[str] = None
    label: str


class DirectoryNotFound(BaseModel):
    """No matching customer, or a customer without eligible vehicles"""


class SingleTarget(BaseModel):
    customer: DirectoryCustomer
    vehicle: DirectoryVehicle

    @property
    def vehicles(self) -> List[DirectoryVehicle]:
        return [self.vehicle]


class MultipleTargets(BaseModel):
    customer: DirectoryCustomer
    vehicles: List[DirectoryVehicle]


DirectoryLookup = Union[DirectoryNotFound, SingleTarget, MultipleTargets]


class RequestContext(BaseModel):
    """Origin metadata recorded with an issued token"""

    ip: Optional[str] = None
    user_agent: Optional[str] = None
    vehicle_label: Optional[str] = None


class CorrelationRef(BaseModel):
    """Directory records the finalization payload refers to"""

    contact_record_id: Optional[str] = None
    vehicle_record_id: Optional[str] = None
