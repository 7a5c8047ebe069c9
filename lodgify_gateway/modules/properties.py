"""Properties API module (v2)."""

from typing import Any, Dict, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule, normalize_list_response


class PropertiesModule(BaseModule):
    """Property listings and their room types."""

    name = "properties"
    version = "v2"
    base_path = "properties"

    async def list_properties(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """GET /v2/properties"""
        return normalize_list_response(await self.list("", params))

    async def get_property(self, property_id: Any) -> Any:
        """GET /v2/properties/{id}"""
        return await self.get("", property_id)

    async def list_property_rooms(self, property_id: Any) -> Any:
        """GET /v2/properties/{id}/rooms"""
        result = await self.request("GET", f"{self.quote_id(property_id, 'Property ID')}/rooms")
        if isinstance(result, dict) and isinstance(result.get("data"), list):
            return result["data"]
        return result

    async def update_availability(self, property_id: Any, payload: Mapping[str, Any]) -> Any:
        """PUT /v2/properties/{id}/availability"""
        path = f"{self.quote_id(property_id, 'Property ID')}/availability"
        self._require_body(path, payload)
        return await self.request("PUT", path, body=payload)
