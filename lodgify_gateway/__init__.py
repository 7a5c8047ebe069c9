"""Resilient request orchestration for the Lodgify API."""

from lodgify_gateway.client.executor import RequestExecutor, create_executor
from lodgify_gateway.exceptions import (
    ErrorKind,
    HttpError,
    OperationError,
    RateLimitError,
    ReadOnlyModeError,
    UnknownError,
    ValidationError,
)
from lodgify_gateway.orchestrator import (
    ApiOrchestrator,
    HealthReport,
    ModuleHealth,
    TransactionStep,
    create_orchestrator,
)

__version__ = "0.1.0"

__all__ = [
    "ApiOrchestrator",
    "HealthReport",
    "ModuleHealth",
    "TransactionStep",
    "create_orchestrator",
    "RequestExecutor",
    "create_executor",
    "ErrorKind",
    "HttpError",
    "OperationError",
    "RateLimitError",
    "ReadOnlyModeError",
    "UnknownError",
    "ValidationError",
]
