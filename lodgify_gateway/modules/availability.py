"""Availability API module (v2)."""

from typing import Any, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule


class AvailabilityModule(BaseModule):
    name = "availability"
    version = "v2"
    base_path = "availability"

    async def get_availability_all(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET /v2/availability"""
        return await self.list("", params or None)

    async def get_availability_for_property(
        self, property_id: Any, params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """GET /v2/availability/{propertyId}"""
        return await self.request("GET", self.quote_id(property_id, "Property ID"), params=params)

    async def get_availability_for_room(
        self, property_id: Any, room_type_id: Any, params: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """GET /v2/availability/{propertyId}/{roomTypeId}"""
        path = f"{self.quote_id(property_id, 'Property ID')}/{self.quote_id(room_type_id, 'Room type ID')}"
        return await self.request("GET", path, params=params)
