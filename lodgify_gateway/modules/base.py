"""Base class and registry for Lodgify API modules.

A module groups the endpoints of one API area (properties, bookings, ...)
under a base path and version. Modules hold no state beyond the executor
they were constructed with.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar
from urllib.parse import quote

from lodgify_gateway.client.executor import RequestExecutor
from lodgify_gateway.core.logging import get_logger

logger = get_logger(__name__)

MODULE_VERSIONS = ("v1", "v2", "both")

M = TypeVar("M", bound="BaseModule")


def normalize_list_response(result: Any) -> Dict[str, Any]:
    """Normalize the list shapes Lodgify returns into ``{"data": [...], "count": n}``."""
    if isinstance(result, list):
        return {"data": result, "count": len(result)}
    if isinstance(result, dict):
        if isinstance(result.get("data"), list):
            return result
        if isinstance(result.get("items"), list):
            normalized = {"data": result["items"], "count": result.get("count") or len(result["items"])}
            if result.get("pagination") is not None:
                normalized["pagination"] = result["pagination"]
            return normalized
    if result is None:
        return {"data": [], "count": 0}
    return {"data": [result], "count": 1}


class BaseModule:
    """Foundation for all domain-specific API modules.

    Subclasses set ``name``, ``version`` and ``base_path`` and build their
    endpoint methods on ``request`` and the CRUD helpers.
    """

    name: str = ""
    version: str = "v2"
    base_path: str = ""

    def __init__(
        self,
        executor: RequestExecutor,
        name: Optional[str] = None,
        version: Optional[str] = None,
        base_path: Optional[str] = None,
    ):
        self.executor = executor
        if name is not None:
            self.name = name
        if version is not None:
            self.version = version
        if base_path is not None:
            self.base_path = base_path
        if self.version not in MODULE_VERSIONS:
            raise ValueError(f"module version must be one of {MODULE_VERSIONS}")

    @property
    def api_version(self) -> Optional[str]:
        """Version passed to the executor; None lets the executor default apply."""
        return None if self.version == "both" else self.version

    def build_endpoint(self, path: str = "") -> str:
        """Join ``path`` onto the module base path."""
        clean_path = path.lstrip("/")
        if not self.base_path:
            return clean_path
        return f"{self.base_path}/{clean_path}" if clean_path else self.base_path

    def quote_id(self, value: Any, field: str = "ID") -> str:
        """URL-quote an identifier, rejecting empty values."""
        if value is None or str(value).strip() == "":
            raise self.executor.classifier.create_validation_error(
                self.build_endpoint(), f"{field} is required"
            )
        return quote(str(value), safe="")

    async def request(self, method: str, path: str = "", **options: Any) -> Any:
        options.setdefault("api_version", self.api_version)
        return await self.executor.request(method, self.build_endpoint(path), **options)

    async def list(self, path: str = "", params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def get(self, path: str, id: Any) -> Any:
        return await self.request("GET", self._join(path, self.quote_id(id)))

    async def create(self, path: str, data: Any) -> Any:
        self._require_body(path, data)
        return await self.request("POST", path, body=data)

    async def update(self, path: str, id: Any, data: Any) -> Any:
        self._require_body(path, data)
        return await self.request("PUT", self._join(path, self.quote_id(id)), body=data)

    async def delete(self, path: str, id: Any) -> Any:
        return await self.request("DELETE", self._join(path, self.quote_id(id)))

    def _require_body(self, path: str, data: Any) -> None:
        if not data:
            raise self.executor.classifier.create_validation_error(
                self.build_endpoint(path), "Request body is required"
            )

    @staticmethod
    def _join(path: str, tail: str) -> str:
        return f"{path.rstrip('/')}/{tail}" if path else tail

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r})"


class ModuleRegistry:
    """Keyed registry of modules bound to one executor.

    Registering a name twice returns the instance created the first time.
    The registry is only changed by ``register`` and ``clear``.
    """

    def __init__(self, executor: RequestExecutor):
        self._executor = executor
        self._modules: Dict[str, BaseModule] = {}

    def register(self, name: str, factory: Callable[[RequestExecutor], M]) -> M:
        existing = self._modules.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]
        module = factory(self._executor)
        self._modules[name] = module
        logger.debug(f"Registered API module '{name}' ({module.version})")
        return module

    def get(self, name: str) -> Optional[BaseModule]:
        return self._modules.get(name)

    def has(self, name: str) -> bool:
        return name in self._modules

    def items(self) -> List[tuple]:
        return list(self._modules.items())

    def all(self) -> List[BaseModule]:
        return list(self._modules.values())

    def clear(self) -> None:
        self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)
