"""Coordination of Lodgify API modules over one shared executor.

The orchestrator owns the module registry and offers the multi-call
patterns the tool layer builds on:

- execute_across_modules: fan one operation out to several modules
- batch: concurrent raw calls, results in input order
- transaction: sequential steps with compensating rollback
- health_check: aggregate per-module probe
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

import httpx

from lodgify_gateway.client.executor import RequestExecutor, create_executor
from lodgify_gateway.client.rate_limiter import RateLimitStatus
from lodgify_gateway.core.config import Settings
from lodgify_gateway.core.logging import get_logger
from lodgify_gateway.modules import DEFAULT_MODULES
from lodgify_gateway.modules.base import BaseModule, ModuleRegistry

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModule)

MaybeAwaitable = Union[T, Awaitable[T]]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class TransactionStep:
    """One step of a transaction.

    ``execute`` and ``rollback`` may be plain or async callables taking no
    arguments. A rollback that needs the step result should close over it.
    """

    execute: Callable[[], MaybeAwaitable[Any]]
    rollback: Optional[Callable[[], MaybeAwaitable[Any]]] = None
    name: str = ""


@dataclass
class ModuleHealth:
    healthy: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"healthy": self.healthy}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class HealthReport:
    healthy: bool
    modules: Dict[str, ModuleHealth] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "modules": {name: health.to_dict() for name, health in self.modules.items()},
        }


class ApiOrchestrator:
    """Registry and coordinator for modules sharing one RequestExecutor.

    Usage:
        async with create_orchestrator() as orchestrator:
            properties = orchestrator.get_module("properties")
            listing = await properties.list_properties()
            report = await orchestrator.health_check()
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor
        self._registry = ModuleRegistry(executor)

    # Registry

    def register_module(self, name: str, factory: Callable[[RequestExecutor], M]) -> M:
        """Register a module; a second registration under the same name is a no-op."""
        return self._registry.register(name, factory)

    def register_default_modules(self) -> None:
        for name, module_cls in DEFAULT_MODULES.items():
            self.register_module(name, module_cls)

    def get_module(self, name: str) -> Optional[BaseModule]:
        return self._registry.get(name)

    def has_module(self, name: str) -> bool:
        return self._registry.has(name)

    def get_all_modules(self) -> List[BaseModule]:
        return self._registry.all()

    def clear_modules(self) -> None:
        self._registry.clear()

    # Executor passthroughs

    @property
    def read_only(self) -> bool:
        return self.executor.read_only

    def rate_limit_status(self) -> RateLimitStatus:
        return self.executor.rate_limit_status()

    # Coordination

    async def execute_across_modules(
        self,
        operation: Callable[[BaseModule], Awaitable[T]],
        module_names: Optional[Iterable[str]] = None,
    ) -> Dict[str, T]:
        """Run ``operation`` against several modules concurrently.

        Args:
            operation: Coroutine function receiving the module
            module_names: Names to target, all registered modules when None.
                Unknown names are skipped.

        Returns:
            Mapping of module name to result

        Raises:
            The first exception raised by any module. Siblings keep running and
            their results are discarded.
        """
        if module_names is None:
            targets = self._registry.items()
        else:
            targets = [
                (name, self._registry.get(name))
                for name in module_names
                if self._registry.has(name)
            ]

        async def run(name: str, module: BaseModule) -> T:
            try:
                return await operation(module)
            except Exception as e:
                logger.error(f"Operation failed for module '{name}': {e}")
                raise

        results = await asyncio.gather(*(run(name, module) for name, module in targets))
        return {name: result for (name, _), result in zip(targets, results)}

    async def batch(self, operations: Sequence[Mapping[str, Any]]) -> List[Any]:
        """Run raw API calls concurrently, returning results in input order.

        Each operation is ``{"method": ..., "path": ..., "options": {...}}``,
        where ``options`` holds keyword arguments for ``RequestExecutor.request``.
        In read-only mode a batch containing any write fails before anything is
        sent.
        """
        self.executor.write_gate.check_batch(operations)
        return list(await asyncio.gather(*(
            self.executor.request(op["method"], op["path"], **dict(op.get("options") or {}))
            for op in operations
        )))

    async def transaction(self, steps: Sequence[TransactionStep]) -> List[Any]:
        """Run steps in order, undoing completed ones if any step fails.

        On failure the rollbacks of the steps that already succeeded run in
        reverse order. Rollback failures are
        logged and do not stop the remaining rollbacks. The original error is
        re-raised.
        """
        results: List[Any] = []
        completed: List[TransactionStep] = []

        for index, step in enumerate(steps):
            try:
                result = await _resolve(step.execute())
            except Exception as e:
                logger.error(
                    f"Transaction step {step.name or index + 1} failed: {e}; "
                    f"rolling back {len(completed)} completed steps"
                )
                await self._rollback(completed)
                raise
            results.append(result)
            completed.append(step)

        return results

    async def _rollback(self, completed: List[TransactionStep]) -> None:
        for step in reversed(completed):
            if step.rollback is None:
                continue
            try:
                await _resolve(step.rollback())
            except Exception as e:
                logger.error(f"Rollback failed for step {step.name or '<unnamed>'}: {e}")

    async def health_check(self) -> HealthReport:
        """Probe ``GET /{version}/health`` for every registered module in parallel.

        Probes skip the rate limiter and retries. Any failure, 404 included,
        marks the module unhealthy. With no modules registered the report is
        healthy.
        """
        modules = self._registry.items()

        async def probe(module: BaseModule) -> ModuleHealth:
            try:
                await self.executor.request(
                    "GET",
                    "health",
                    api_version=module.api_version,
                    skip_retry=True,
                    skip_rate_limit=True,
                )
            except Exception as e:
                logger.warning(f"Health check failed for module '{module.name}': {e}")
                return ModuleHealth(healthy=False, error=str(e))
            return ModuleHealth(healthy=True)

        results = await asyncio.gather(*(probe(module) for _, module in modules))
        report = HealthReport(
            healthy=all(health.healthy for health in results),
            modules={name: health for (name, _), health in zip(modules, results)},
        )
        return report

    async def aclose(self) -> None:
        await self.executor.aclose()

    async def __aenter__(self) -> "ApiOrchestrator":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_orchestrator(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    register_defaults: bool = True,
) -> ApiOrchestrator:
    """Build an orchestrator from settings.

    Args:
        settings: Settings to use, the process settings when None
        http_client: Externally managed client to share
        register_defaults: Register every built-in domain module
    """
    if settings is None:
        from lodgify_gateway.core.config import settings as default_settings
        settings = default_settings

    orchestrator = ApiOrchestrator(create_executor(settings, http_client=http_client))
    if register_defaults:
        orchestrator.register_default_modules()
    logger.info(
        f"Orchestrator ready: {len(orchestrator.get_all_modules())} modules, "
        f"read_only={orchestrator.read_only}"
    )
    return orchestrator
