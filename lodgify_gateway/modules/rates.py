"""Rates API modules: v2 calendar/settings and the v1 bulk update endpoint."""

from typing import Any, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule


class RatesModule(BaseModule):
    name = "rates"
    version = "v2"
    base_path = "rates"

    async def get_daily_rates(self, params: Mapping[str, Any]) -> Any:
        """GET /v2/rates/calendar

        ``params`` must name a room type, a house and a date range.
        """
        required = ("RoomTypeId", "HouseId", "StartDate", "EndDate")
        missing = [key for key in required if not params.get(key)]
        if missing:
            raise self.executor.classifier.create_validation_error(
                self.build_endpoint("calendar"), f"Missing required parameters: {', '.join(missing)}"
            )
        return await self.request("GET", "calendar", params=params)

    async def get_rate_settings(self, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET /v2/rates/settings"""
        return await self.request("GET", "settings", params=params or None)

    async def create_rate(self, payload: Mapping[str, Any]) -> Any:
        return await self.create("", payload)

    async def update_rate(self, rate_id: Any, payload: Mapping[str, Any]) -> Any:
        return await self.update("", rate_id, payload)


class RatesV1Module(BaseModule):
    name = "rates-v1"
    version = "v1"
    base_path = "rates"

    async def update_rates(self, payload: Mapping[str, Any]) -> Any:
        """POST /v1/rates/savewithoutavailability"""
        if not payload.get("property_id") or not payload.get("rates"):
            raise self.executor.classifier.create_validation_error(
                self.build_endpoint("savewithoutavailability"),
                "property_id and at least one rate are required",
            )
        return await self.request("POST", "savewithoutavailability", body=payload)
