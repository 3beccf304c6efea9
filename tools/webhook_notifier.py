"""
Webhook Notification Tool
Best-effort outbound notifications about document changes
"""

import logging
from typing import Any, Dict, Optional
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

import httpx

from config import settings


logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {"password", "password_hash"}


class WebhookAction(str, Enum):
    """Kinds of document change"""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class WebhookResult:
    """Outcome of one delivery attempt"""
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


def sanitize_data(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop credential fields and render dates as ISO strings"""
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if key in SENSITIVE_FIELDS:
            continue
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, Enum):
            value = value.value
        sanitized[key] = value
    return sanitized


def build_payload(
    action: WebhookAction,
    collection: str,
    document_id: str,
    data: Optional[Dict[str, Any]] = None,
    previous_data: Optional[Dict[str, Any]] = None,
    user: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Build the change envelope.

    Args:
        action: create, update or delete
        collection: Collection name of the changed document
        document_id: Id of the changed document
        data: Current document fields
        previous_data: Document fields before the change
        user: Acting user (anything with id, role and name)
    """
    return {
        "action": WebhookAction(action).value,
        "collection": collection,
        "documentId": document_id,
        "data": sanitize_data(data),
        "previousData": sanitize_data(previous_data),
        "timestamp": datetime.utcnow().isoformat(),
        "userId": getattr(user, "id", None),
        "userRole": getattr(user, "role", None),
        "userName": getattr(user, "name", None),
    }


class WebhookNotifier:
    """
    Fire-and-forget JSON POSTs to a single webhook endpoint.

    Failures are logged and never raised to the caller.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        source: Optional[str] = None,
        environment: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url if url is not None else settings.WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.WEBHOOK_TIMEOUT
        self.source = source or settings.WEBHOOK_SOURCE
        self.environment = environment or settings.ENV
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def send(self, payload: Dict[str, Any]) -> WebhookResult:
        """Deliver a payload built by build_payload"""
        if not self.enabled:
            logger.debug(
                f"Webhook disabled, dropping {payload.get('action')} "
                f"on {payload.get('collection')}/{payload.get('documentId')}"
            )
            return WebhookResult(success=False, error="Webhook not configured")

        body = {
            **payload,
            "source": self.source,
            "environment": self.environment,
            "timestamp": datetime.utcnow().isoformat(),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"}
            ) as client:
                response = await client.post(self.url, json=body)
        except httpx.HTTPError as e:
            logger.error(
                f"Webhook delivery failed for {body.get('collection')}/"
                f"{body.get('documentId')}: {e}"
            )
            return WebhookResult(success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected webhook error: {e}")
            return WebhookResult(success=False, error=str(e))

        if not response.is_success:
            logger.warning(
                f"Webhook responded {response.status_code} for "
                f"{body.get('collection')}/{body.get('documentId')}: {response.text[:200]}"
            )
            return WebhookResult(
                success=False,
                status_code=response.status_code,
                error=response.text[:200]
            )

        logger.info(
            f"Webhook sent: {body.get('action')} {body.get('collection')}/"
            f"{body.get('documentId')}"
        )
        return WebhookResult(success=True, status_code=response.status_code)

    async def notify(
        self,
        action: WebhookAction,
        collection: str,
        document_id: str,
        data: Optional[Dict[str, Any]] = None,
        previous_data: Optional[Dict[str, Any]] = None,
        user: Optional[Any] = None
    ) -> WebhookResult:
        """Build and send in one step"""
        payload = build_payload(action, collection, document_id, data, previous_data, user)
        return await self.send(payload)


# Singleton instance
webhook_notifier = WebhookNotifier()
