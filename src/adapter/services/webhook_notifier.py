"""
Finalization webhook over HTTP (httpx).

Signs `f"{timestamp}.{body}"` with HMAC-SHA256 and posts the exact signed
bytes. Retries are synchronous and bounded because the caller holds a
row lock for the whole delivery.
"""

import asyncio
import hmac
import json
import logging
import time
from hashlib import sha256
from typing import Dict, Optional, Tuple

import httpx

from src.app.services.finalization_notifier import FinalizationPayload, IFinalizationNotifier

logger = logging.getLogger(__name__)

EVENT_HEADER = "X-Webhook-Event"
TIMESTAMP_HEADER = "X-Webhook-Timestamp"
SIGNATURE_HEADER = "X-Webhook-Signature"


def sign(secret: str, timestamp: str, body: bytes) -> str:
    """Hex HMAC-SHA256 over timestamp + "." + body"""
    signing_input = timestamp.encode("utf-8") + b"." + body
    return hmac.new(secret.encode("utf-8"), signing_input, sha256).hexdigest()


class WebhookNotifier(IFinalizationNotifier):
    """Delivers finalization events to the system of record"""

    def __init__(
        self,
        url: str,
        secret: str,
        timeout: float = 8.0,
        max_attempts: int = 2,
        retry_delay: float = 0.5,
    ):
        self.url = url
        self.secret = secret
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    def _build_request(self, payload: FinalizationPayload) -> Tuple[bytes, Dict[str, str]]:
        body = json.dumps(payload.model_dump(), separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        timestamp = str(int(time.time()))
        headers = {
            "Content-Type": "application/json",
            EVENT_HEADER: payload.evento,
            TIMESTAMP_HEADER: timestamp,
            SIGNATURE_HEADER: f"sha256={sign(self.secret, timestamp, body)}",
        }
        return body, headers

    async def _attempt(self, client: httpx.AsyncClient, payload: FinalizationPayload) -> Optional[int]:
        """POST once, returns the status code or None on transport error"""
        body, headers = self._build_request(payload)
        try:
            response = await client.post(self.url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "Webhook transport error request_id=%s: %s",
                payload.request_id,
                type(exc).__name__,
            )
            return None
        return response.status_code

    async def deliver(self, payload: FinalizationPayload) -> bool:
        if not self.url or not self.secret:
            logger.error("Webhook URL or secret not configured, cannot finalize reset")
            return False

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for attempt in range(1, self.max_attempts + 1):
                status_code = await self._attempt(client, payload)
                if status_code is not None and 200 <= status_code < 300:
                    logger.info(
                        "Webhook delivered request_id=%s (attempt %d/%d)",
                        payload.request_id,
                        attempt,
                        self.max_attempts,
                    )
                    return True

                logger.warning(
                    "Webhook attempt %d/%d failed request_id=%s status=%s",
                    attempt,
                    self.max_attempts,
                    payload.request_id,
                    status_code,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay)

        return False
