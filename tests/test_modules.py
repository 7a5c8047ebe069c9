"""Tests for the domain API modules."""

import json

import pytest
from httpx import Response

from lodgify_gateway.exceptions import ReadOnlyModeError, ValidationError
from lodgify_gateway.modules import (
    AvailabilityModule,
    BaseModule,
    BookingsModule,
    MessagingModule,
    PropertiesModule,
    QuotesModule,
    RatesModule,
    RatesV1Module,
    WebhooksModule,
    normalize_list_response,
)

BASE_URL = "https://api.lodgify.test"

VALID_BOOKING = {
    "propertyId": 684855,
    "checkIn": "2026-11-20",
    "checkOut": "2026-11-25",
    "guest": {"name": "Ada Lovelace"},
    "guestBreakdown": {"adults": 2},
}


class TestNormalizeListResponse:
    @pytest.mark.parametrize("raw,expected", [
        ([1, 2], {"data": [1, 2], "count": 2}),
        ({"data": [1], "count": 9}, {"data": [1], "count": 9}),
        ({"items": [1, 2, 3]}, {"data": [1, 2, 3], "count": 3}),
        ({"items": [], "count": 0, "pagination": {"page": 1}}, {"data": [], "count": 0, "pagination": {"page": 1}}),
        (None, {"data": [], "count": 0}),
        ({"id": 1}, {"data": [{"id": 1}], "count": 1}),
    ])
    def test_shapes(self, raw, expected):
        assert normalize_list_response(raw) == expected


class TestBaseModule:
    @pytest.mark.asyncio
    async def test_build_endpoint(self, executor):
        module = BaseModule(executor, name="x", base_path="reservations/bookings")

        assert module.build_endpoint() == "reservations/bookings"
        assert module.build_endpoint("/5/keyCodes") == "reservations/bookings/5/keyCodes"

    @pytest.mark.asyncio
    async def test_build_endpoint_without_base(self, executor):
        assert BaseModule(executor, name="x").build_endpoint("health") == "health"

    @pytest.mark.asyncio
    async def test_invalid_version(self, executor):
        with pytest.raises(ValueError):
            BaseModule(executor, name="x", version="v3")

    @pytest.mark.asyncio
    async def test_both_defers_to_executor_default(self, executor):
        assert BaseModule(executor, name="x", version="both").api_version is None

    @pytest.mark.asyncio
    async def test_empty_id_rejected(self, executor, respx_mock):
        module = PropertiesModule(executor)

        with pytest.raises(ValidationError) as exc_info:
            await module.get_property("  ")

        assert exc_info.value.message == "Lodgify 400: ID is required"
        assert len(respx_mock.calls) == 0

    @pytest.mark.asyncio
    async def test_id_is_quoted(self, executor):
        module = PropertiesModule(executor)

        assert module.quote_id("a/b c") == "a%2Fb%20c"
        assert module.quote_id(42) == "42"

    @pytest.mark.asyncio
    async def test_empty_body_rejected(self, executor):
        with pytest.raises(ValidationError, match="Request body is required"):
            await RatesModule(executor).create_rate({})


class TestPropertiesModule:
    @pytest.mark.asyncio
    async def test_list_properties_normalized(self, executor, respx_mock):
        route = respx_mock.get(f"{BASE_URL}/v2/properties").mock(
            return_value=Response(200, json={"items": [{"id": 1}], "count": 1})
        )

        result = await PropertiesModule(executor).list_properties({"page": 2})

        assert result == {"data": [{"id": 1}], "count": 1}
        assert route.calls.last.request.url.params["page"] == "2"

    @pytest.mark.asyncio
    async def test_list_rooms_unwraps_data(self, executor, respx_mock):
        respx_mock.get(f"{BASE_URL}/v2/properties/7/rooms").mock(
            return_value=Response(200, json={"data": [{"id": 70}]})
        )

        assert await PropertiesModule(executor).list_property_rooms(7) == [{"id": 70}]

    @pytest.mark.asyncio
    async def test_update_availability(self, executor, respx_mock):
        route = respx_mock.put(f"{BASE_URL}/v2/properties/7/availability").mock(
            return_value=Response(200, json={"ok": True})
        )

        await PropertiesModule(executor).update_availability(7, {"is_available": False})

        assert json.loads(route.calls.last.request.content) == {"is_available": False}


class TestBookingsModule:
    @pytest.mark.asyncio
    async def test_create_booking(self, executor, respx_mock):
        route = respx_mock.post(f"{BASE_URL}/v2/reservations/bookings").mock(
            return_value=Response(201, json={"id": 99})
        )

        assert await BookingsModule(executor).create_booking(VALID_BOOKING) == {"id": 99}
        assert json.loads(route.calls.last.request.content)["propertyId"] == 684855

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing,message", [
        ("propertyId", "Property ID is required"),
        ("checkIn", "Check-in and check-out dates are required"),
        ("guest", "Guest name is required"),
        ("guestBreakdown", "At least one adult guest is required"),
    ])
    async def test_create_booking_validation(self, executor, respx_mock, missing, message):
        booking = {key: value for key, value in VALID_BOOKING.items() if key != missing}

        with pytest.raises(ValidationError) as exc_info:
            await BookingsModule(executor).create_booking(booking)

        assert exc_info.value.message == f"Lodgify 400: {message}"
        assert exc_info.value.path == "reservations/bookings"
        assert len(respx_mock.calls) == 0

    @pytest.mark.asyncio
    async def test_create_booking_read_only(self, make_executor, respx_mock):
        module = BookingsModule(make_executor(read_only=True))

        with pytest.raises(ReadOnlyModeError):
            await module.create_booking(VALID_BOOKING)

        assert len(respx_mock.calls) == 0

    @pytest.mark.asyncio
    async def test_delete_booking(self, executor, respx_mock):
        respx_mock.delete(f"{BASE_URL}/v2/reservations/bookings/12").mock(return_value=Response(204))

        result = await BookingsModule(executor).delete_booking(12)

        assert result == {"success": True, "message": "Booking 12 has been cancelled"}

    @pytest.mark.asyncio
    async def test_payment_link(self, executor, respx_mock):
        get_route = respx_mock.get(f"{BASE_URL}/v2/reservations/bookings/12/quote/paymentLink").mock(
            return_value=Response(200, json={"url": "https://pay"})
        )
        post_route = respx_mock.post(f"{BASE_URL}/v2/reservations/bookings/12/quote/paymentLink").mock(
            return_value=Response(200, json={"url": "https://pay/new"})
        )
        module = BookingsModule(executor)

        assert await module.get_payment_link(12) == {"url": "https://pay"}
        assert await module.create_payment_link(12, {"amount": 100}) == {"url": "https://pay/new"}
        assert get_route.call_count == 1
        assert post_route.call_count == 1

    @pytest.mark.asyncio
    async def test_key_codes_and_checkin(self, executor, respx_mock):
        keys = respx_mock.put(f"{BASE_URL}/v2/reservations/bookings/12/keyCodes").mock(
            return_value=Response(200, json={})
        )
        checkin = respx_mock.put(f"{BASE_URL}/v2/reservations/bookings/12/checkin").mock(
            return_value=Response(200, json={})
        )
        checkout = respx_mock.put(f"{BASE_URL}/v2/reservations/bookings/12/checkout").mock(
            return_value=Response(200, json={})
        )
        module = BookingsModule(executor)

        await module.update_key_codes(12, {"keyCodes": ["1234"]})
        await module.checkin_booking(12, "15:00")
        await module.checkout_booking(12)

        assert json.loads(keys.calls.last.request.content) == {"keyCodes": ["1234"]}
        assert json.loads(checkin.calls.last.request.content) == {"time": "15:00"}
        assert json.loads(checkout.calls.last.request.content) == {}

    @pytest.mark.asyncio
    async def test_upcoming_bookings(self, executor, respx_mock):
        route = respx_mock.get(f"{BASE_URL}/v2/reservations/bookings").mock(
            return_value=Response(200, json=[])
        )

        await BookingsModule(executor).get_upcoming_bookings(property_id=5, limit=3)

        params = route.calls.last.request.url.params
        assert params["propertyId"] == "5"
        assert params["limit"] == "3"
        assert params["status[0]"] == "confirmed"
        assert "checkInFrom" in params


class TestAvailabilityModule:
    @pytest.mark.asyncio
    async def test_for_room(self, executor, respx_mock):
        route = respx_mock.get(f"{BASE_URL}/v2/availability/1/2").mock(return_value=Response(200, json=[]))

        await AvailabilityModule(executor).get_availability_for_room(1, 2, {"start": "2026-11-01"})

        assert route.calls.last.request.url.params["start"] == "2026-11-01"

    @pytest.mark.asyncio
    async def test_for_property(self, executor, respx_mock):
        respx_mock.get(f"{BASE_URL}/v2/availability/1").mock(return_value=Response(200, json=[{"a": 1}]))

        assert await AvailabilityModule(executor).get_availability_for_property(1) == [{"a": 1}]


class TestRatesModules:
    @pytest.mark.asyncio
    async def test_daily_rates(self, executor, respx_mock):
        route = respx_mock.get(f"{BASE_URL}/v2/rates/calendar").mock(return_value=Response(200, json={}))
        params = {"RoomTypeId": 1, "HouseId": 2, "StartDate": "2026-11-01", "EndDate": "2026-11-30"}

        await RatesModule(executor).get_daily_rates(params)

        assert route.calls.last.request.url.params["HouseId"] == "2"

    @pytest.mark.asyncio
    async def test_daily_rates_missing_params(self, executor):
        with pytest.raises(ValidationError, match="StartDate, EndDate"):
            await RatesModule(executor).get_daily_rates({"RoomTypeId": 1, "HouseId": 2})

    @pytest.mark.asyncio
    async def test_v1_update_rates(self, executor, respx_mock):
        route = respx_mock.post(f"{BASE_URL}/v1/rates/savewithoutavailability").mock(
            return_value=Response(200, json={"ok": True})
        )

        await RatesV1Module(executor).update_rates({"property_id": 1, "rates": [{"price": 100}]})

        assert route.call_count == 1


class TestQuotesModule:
    @pytest.mark.asyncio
    async def test_get_quote_flattens_params(self, executor, respx_mock):
        route = respx_mock.get(f"{BASE_URL}/v2/quote/10").mock(return_value=Response(200, json={"total": 500}))

        result = await QuotesModule(executor).get_quote(
            10,
            {"from": "2026-11-20", "to": "2026-11-25", "guest_breakdown": {"adults": 2}},
        )

        assert result == {"total": 500}
        assert route.calls.last.request.url.params["guest_breakdown[adults]"] == "2"

    @pytest.mark.asyncio
    async def test_get_quote_requires_dates(self, executor):
        with pytest.raises(ValidationError):
            await QuotesModule(executor).get_quote(10, {"from": "2026-11-20"})


class TestMessagingModule:
    @pytest.mark.asyncio
    async def test_thread_operations(self, executor, respx_mock):
        thread = respx_mock.get(f"{BASE_URL}/v2/messaging/abc").mock(return_value=Response(200, json={}))
        send = respx_mock.post(f"{BASE_URL}/v2/messaging/abc/messages").mock(return_value=Response(200, json={}))
        read = respx_mock.put(f"{BASE_URL}/v2/messaging/abc/read").mock(return_value=Response(204))
        archive = respx_mock.put(f"{BASE_URL}/v2/messaging/abc/archive").mock(return_value=Response(204))
        module = MessagingModule(executor)

        await module.get_thread("abc")
        await module.send_message("abc", {"message": "Hello"})
        await module.mark_thread_as_read("abc")
        await module.archive_thread("abc")

        for route in (thread, send, read, archive):
            assert route.call_count == 1


class TestWebhooksModule:
    @pytest.mark.asyncio
    async def test_subscribe(self, executor, respx_mock):
        route = respx_mock.post(f"{BASE_URL}/v1/webhooks/v1/subscribe").mock(
            return_value=Response(200, json={"id": "w1"})
        )

        await WebhooksModule(executor).subscribe("booking_change", "https://hooks.example.com/x")

        assert json.loads(route.calls.last.request.content) == {
            "event": "booking_change",
            "target_url": "https://hooks.example.com/x",
        }

    @pytest.mark.asyncio
    async def test_subscribe_rejects_unknown_event(self, executor):
        with pytest.raises(ValidationError, match="Unknown webhook event"):
            await WebhooksModule(executor).subscribe("nope", "https://hooks.example.com/x")

    @pytest.mark.asyncio
    async def test_subscribe_requires_https(self, executor):
        with pytest.raises(ValidationError, match="https"):
            await WebhooksModule(executor).subscribe("booking_change", "http://hooks.example.com/x")

    @pytest.mark.asyncio
    async def test_list_and_unsubscribe(self, executor, respx_mock):
        respx_mock.get(f"{BASE_URL}/v1/webhooks/v1/list").mock(return_value=Response(200, json=[]))
        unsubscribe = respx_mock.delete(f"{BASE_URL}/v1/webhooks/v1/unsubscribe").mock(
            return_value=Response(204)
        )
        module = WebhooksModule(executor)

        assert await module.list_webhooks() == []
        await module.unsubscribe("w1")

        assert json.loads(unsubscribe.calls.last.request.content) == {"id": "w1"}
