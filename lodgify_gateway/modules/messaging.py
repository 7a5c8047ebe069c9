"""Messaging API module (v2)."""

from typing import Any, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule


class MessagingModule(BaseModule):
    name = "messaging"
    version = "v2"
    base_path = "messaging"

    async def list_threads(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.list("", params or None)

    async def get_thread(self, thread_guid: Any, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", self.quote_id(thread_guid, "Thread GUID"), params=params)

    async def send_message(self, thread_guid: Any, message: Mapping[str, Any]) -> Any:
        path = f"{self.quote_id(thread_guid, 'Thread GUID')}/messages"
        self._require_body(path, message)
        return await self.request("POST", path, body=message)

    async def mark_thread_as_read(self, thread_guid: Any) -> Any:
        return await self.request("PUT", f"{self.quote_id(thread_guid, 'Thread GUID')}/read")

    async def archive_thread(self, thread_guid: Any) -> Any:
        return await self.request("PUT", f"{self.quote_id(thread_guid, 'Thread GUID')}/archive")
