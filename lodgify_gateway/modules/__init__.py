"""Domain modules for the Lodgify API.

Each module wraps one API area and issues its calls through the shared
RequestExecutor.
"""

from typing import Dict, Type

from lodgify_gateway.modules.availability import AvailabilityModule
from lodgify_gateway.modules.base import BaseModule, ModuleRegistry, normalize_list_response
from lodgify_gateway.modules.bookings import BookingsModule
from lodgify_gateway.modules.messaging import MessagingModule
from lodgify_gateway.modules.properties import PropertiesModule
from lodgify_gateway.modules.quotes import QuotesModule
from lodgify_gateway.modules.rates import RatesModule, RatesV1Module
from lodgify_gateway.modules.webhooks import WebhooksModule

DEFAULT_MODULES: Dict[str, Type[BaseModule]] = {
    module.name: module
    for module in (
        PropertiesModule,
        BookingsModule,
        AvailabilityModule,
        RatesModule,
        RatesV1Module,
        QuotesModule,
        MessagingModule,
        WebhooksModule,
    )
}

__all__ = [
    "BaseModule",
    "ModuleRegistry",
    "normalize_list_response",
    "DEFAULT_MODULES",
    "AvailabilityModule",
    "BookingsModule",
    "MessagingModule",
    "PropertiesModule",
    "QuotesModule",
    "RatesModule",
    "RatesV1Module",
    "WebhooksModule",
]
