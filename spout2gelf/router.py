import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Route:
    """
    Where and how a log stream is shipped.
    `adapter` is either a bare adapter name ("gelf") or adapter and
    transport joined with a plus sign ("gelf+tcp").
    """

    adapter: str
    address: str

    def adapter_type(self) -> str:
        return self.adapter.split("+", 1)[0]

    def adapter_transport(self, default: str) -> str:
        parts = self.adapter.split("+", 1)
        if len(parts) > 1 and parts[1]:
            return parts[1]
        return default


class Registry(Generic[T]):
    def __init__(self, name: str):
        self.name = name
        self._items: dict[str, T] = {}

    def register(self, item: T, name: str):
        if name in self._items:
            logger.debug("%s: replacing %r", self.name, name)
        self._items[name] = item

    def lookup(self, name: str) -> Optional[T]:
        return self._items.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._items


adapter_factories: Registry[Callable] = Registry("adapter_factories")
adapter_transports: Registry[Callable] = Registry("adapter_transports")
