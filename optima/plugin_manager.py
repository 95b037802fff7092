"""Plugins shared by agents and the manager that controls access to them."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple


class PluginType(Enum):
    """Whether several transactions may use a plugin at the same time."""

    SHAREABLE = "shareable"
    NONSHAREABLE = "nonshareable"


class PluginStatus(Enum):
    """Whether a non-shareable plugin is currently held."""

    FREE = "free"
    SEIZED = "seized"


class PluginInstance(ABC):
    """A tool that agents operate; the manager assigns its ``plugin_id``."""

    plugin_id: int = -1

    @abstractmethod
    def operate(self, input_parameters: Any) -> Any:
        """Run the plugin's operation on the given input and return its output."""


PluginFactory = Callable[[], PluginInstance]


class PluginManager:
    """Creates one instance per plugin and checks who may seize it."""

    def __init__(
        self,
        factories: Sequence[PluginFactory],
        plugin_types: Sequence[PluginType],
        plugin_ids: Sequence[int],
        plugin_accesses: Iterable[Tuple[int, int]] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._instances: Dict[int, PluginInstance] = {}
        self._types: Dict[int, PluginType] = {}
        self._statuses: Dict[int, PluginStatus] = {}
        self._allowed_agent_types: Dict[int, List[int]] = {}
        self._non_shareable: Set[int] = set()

        for factory, plugin_type, plugin_id in zip(factories, plugin_types, plugin_ids, strict=True):
            instance = factory()
            instance.plugin_id = plugin_id
            self._instances[plugin_id] = instance
            self._types[plugin_id] = plugin_type
            self._statuses[plugin_id] = PluginStatus.FREE
            self._allowed_agent_types[plugin_id] = []
            if plugin_type is PluginType.NONSHAREABLE:
                self._non_shareable.add(plugin_id)

        for agent_type, plugin_id in plugin_accesses:
            self._allowed_agent_types.setdefault(plugin_id, []).append(agent_type)

    def seize_plugin(self, plugin_id: int, agent_type: int) -> PluginInstance:
        """Hand the plugin to an agent of the given type, locking it if non-shareable."""
        # Imported here to keep this module free of import cycles with the error module users.
        from optima.exceptions import UnauthorizedAccessError

        with self._lock:
            if agent_type not in self._allowed_agent_types.get(plugin_id, ()):
                raise UnauthorizedAccessError("This type of agent is not allowed to seize this plugin")
            if self._types[plugin_id] is PluginType.NONSHAREABLE:
                if self._statuses[plugin_id] is PluginStatus.SEIZED:
                    raise UnauthorizedAccessError("This plugin is seized by another transaction")
                self._statuses[plugin_id] = PluginStatus.SEIZED
            return self._instances[plugin_id]

    def release_plugin(self, instance: PluginInstance) -> None:
        """Mark the plugin free again."""
        with self._lock:
            self._statuses[instance.plugin_id] = PluginStatus.FREE

    def non_shareable(self, plugins: Optional[Iterable[int]] = None) -> Set[int]:
        """The non-shareable plugins among ``plugins``, or all of them if omitted."""
        if plugins is None:
            return set(self._non_shareable)
        return {p for p in plugins if self._types.get(p) is PluginType.NONSHAREABLE}