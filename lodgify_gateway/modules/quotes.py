"""Quotes API module (v2)."""

from typing import Any, Mapping

from lodgify_gateway.modules.base import BaseModule


class QuotesModule(BaseModule):
    name = "quotes"
    version = "v2"
    base_path = "quote"

    async def get_quote(self, property_id: Any, params: Mapping[str, Any]) -> Any:
        """GET /v2/quote/{propertyId}

        Nested params such as ``{"guest_breakdown": {"adults": 2}}`` are sent in
        bracket notation.
        """
        endpoint = self.build_endpoint(str(property_id or ""))
        if not params.get("from") or not params.get("to"):
            raise self.executor.classifier.create_validation_error(
                endpoint, "Both 'from' and 'to' dates are required"
            )
        return await self.request("GET", self.quote_id(property_id, "Property ID"), params=params)
