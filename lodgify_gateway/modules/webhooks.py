"""Webhooks API module (v1)."""

from typing import Any, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule

WEBHOOK_EVENTS = frozenset({
    "rate_change",
    "availability_change",
    "booking_new_any_status",
    "booking_new_status_booked",
    "booking_change",
    "booking_status_change_booked",
    "booking_status_change_tentative",
    "booking_status_change_open",
    "booking_status_change_declined",
    "guest_message_received",
})


class WebhooksModule(BaseModule):
    name = "webhooks"
    version = "v1"
    base_path = "webhooks/v1"

    async def list_webhooks(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.list("list", params or None)

    async def subscribe(self, event: str, target_url: str) -> Any:
        """POST /v1/webhooks/v1/subscribe"""
        endpoint = self.build_endpoint("subscribe")
        if event not in WEBHOOK_EVENTS:
            raise self.executor.classifier.create_validation_error(
                endpoint, f"Unknown webhook event '{event}'"
            )
        if not target_url.startswith("https://"):
            raise self.executor.classifier.create_validation_error(
                endpoint, "target_url must be an https URL"
            )
        return await self.request("POST", "subscribe", body={"event": event, "target_url": target_url})

    async def unsubscribe(self, webhook_id: Any) -> Any:
        self.quote_id(webhook_id, "Webhook ID")
        return await self.request("DELETE", "unsubscribe", body={"id": str(webhook_id)})

    async def delete_webhook(self, webhook_id: Any) -> Any:
        return await self.delete("", webhook_id)
