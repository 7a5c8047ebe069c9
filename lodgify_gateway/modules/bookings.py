"""Bookings API module (v2 reservations)."""

from datetime import date
from typing import Any, Dict, Mapping, Optional

from lodgify_gateway.modules.base import BaseModule, normalize_list_response


class BookingsModule(BaseModule):
    """Reservations: CRUD, payment links, key codes and check-in/out."""

    name = "bookings"
    version = "v2"
    base_path = "reservations/bookings"

    async def list_bookings(self, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """GET /v2/reservations/bookings"""
        return normalize_list_response(await self.list("", params))

    async def get_booking(self, booking_id: Any) -> Any:
        return await self.get("", booking_id)

    async def create_booking(self, booking: Mapping[str, Any]) -> Any:
        """POST /v2/reservations/bookings

        Requires a property, both stay dates, a guest name and at least one adult.
        """
        endpoint = self.build_endpoint()
        errors = self.executor.classifier
        if not booking.get("propertyId"):
            raise errors.create_validation_error(endpoint, "Property ID is required")
        if not booking.get("checkIn") or not booking.get("checkOut"):
            raise errors.create_validation_error(endpoint, "Check-in and check-out dates are required")
        if not (booking.get("guest") or {}).get("name"):
            raise errors.create_validation_error(endpoint, "Guest name is required")
        if not (booking.get("guestBreakdown") or {}).get("adults"):
            raise errors.create_validation_error(endpoint, "At least one adult guest is required")
        return await self.create("", booking)

    async def update_booking(self, booking_id: Any, updates: Mapping[str, Any]) -> Any:
        return await self.update("", booking_id, updates)

    async def delete_booking(self, booking_id: Any) -> Dict[str, Any]:
        await self.delete("", booking_id)
        return {"success": True, "message": f"Booking {booking_id} has been cancelled"}

    async def get_payment_link(self, booking_id: Any) -> Any:
        """GET /v2/reservations/bookings/{id}/quote/paymentLink"""
        return await self.request("GET", f"{self.quote_id(booking_id, 'Booking ID')}/quote/paymentLink")

    async def create_payment_link(self, booking_id: Any, payload: Mapping[str, Any]) -> Any:
        path = f"{self.quote_id(booking_id, 'Booking ID')}/quote/paymentLink"
        self._require_body(path, payload)
        return await self.request("POST", path, body=payload)

    async def update_key_codes(self, booking_id: Any, key_codes: Mapping[str, Any]) -> Any:
        """PUT /v2/reservations/bookings/{id}/keyCodes"""
        path = f"{self.quote_id(booking_id, 'Booking ID')}/keyCodes"
        self._require_body(path, key_codes)
        return await self.request("PUT", path, body=key_codes)

    async def checkin_booking(self, booking_id: Any, time: Optional[str] = None) -> Any:
        return await self.request(
            "PUT",
            f"{self.quote_id(booking_id, 'Booking ID')}/checkin",
            body={"time": time} if time else {},
        )

    async def checkout_booking(self, booking_id: Any, time: Optional[str] = None) -> Any:
        return await self.request(
            "PUT",
            f"{self.quote_id(booking_id, 'Booking ID')}/checkout",
            body={"time": time} if time else {},
        )

    async def get_external_bookings(self, property_id: Any) -> Any:
        return await self.request("GET", f"{self.quote_id(property_id, 'Property ID')}/externalBookings")

    async def get_upcoming_bookings(self, property_id: Any = None, limit: int = 10) -> Dict[str, Any]:
        """Bookings checking in from today on, soonest first."""
        return await self.list_bookings({
            "propertyId": property_id,
            "checkInFrom": date.today().isoformat(),
            "sort": "checkIn",
            "order": "asc",
            "limit": limit,
            "status": ["confirmed", "booked"],
        })
