"""Identity directory client over HTTP (httpx)."""

import logging
from typing import Any

import httpx

from src.app.services.identity_directory import DirectoryUnavailableError, IIdentityDirectory
from src.domain.entities import (
    DirectoryCustomer,
    DirectoryLookup,
    DirectoryNotFound,
    DirectoryVehicle,
    MultipleTargets,
    SingleTarget,
)

logger = logging.getLogger(__name__)


class HttpIdentityDirectory(IIdentityDirectory):
    """
    Queries `GET {base_url}/contacts?email=&phone=`.

    404 means no such customer. A 200 body carries the customer and all of
    its vehicles, inactive ones are filtered out here.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    async def resolve(self, email: str, phone: str) -> DirectoryLookup:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.base_url}/contacts",
                    params={"email": email, "phone": phone},
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise DirectoryUnavailableError(type(exc).__name__) from exc

        if response.status_code == 404:
            return DirectoryNotFound()
        if response.status_code != 200:
            logger.error("Identity directory answered status=%s", response.status_code)
            raise DirectoryUnavailableError(f"status {response.status_code}")

        try:
            return self._to_lookup(response.json(), email)
        except (ValueError, TypeError, KeyError) as exc:
            # Non-JSON body or records failing validation
            logger.error("Identity directory returned a malformed body: %s", type(exc).__name__)
            raise DirectoryUnavailableError("malformed body") from exc

    @staticmethod
    def _to_lookup(data: Any, email: str) -> DirectoryLookup:
        if not data:
            return DirectoryNotFound()
        if not isinstance(data, dict):
            raise DirectoryUnavailableError("malformed body")
        if not data.get("cliente_id"):
            return DirectoryNotFound()

        records = data.get("vehiculos") or []
        if not isinstance(records, list) or not all(isinstance(v, dict) for v in records):
            raise DirectoryUnavailableError("malformed vehicle list")

        customer = DirectoryCustomer(
            customer_id=str(data["cliente_id"]),
            contact_record_id=data.get("contacto_record_id"),
            email=data.get("email") or email,
        )
        vehicles = [
            DirectoryVehicle(
                vehicle_id=str(v["vehiculo_id"]),
                record_id=v.get("record_id"),
                label=v.get("apodo") or str(v["vehiculo_id"]),
            )
            for v in records
            if v.get("vehiculo_id") and v.get("activo", True)
        ]

        if not vehicles:
            return DirectoryNotFound()
        if len(vehicles) == 1:
            return SingleTarget(customer=customer, vehicle=vehicles[0])
        return MultipleTargets(customer=customer, vehicles=vehicles)
