"""Agents, their pools and the operations they may request."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Deque, Iterable, List, Optional

from optima.exceptions import OptiMAError
from optima.messaging import Message, PostBox
from optima.plugin_manager import PluginManager
from optima.postmaster import Postmaster


class AgentStatus(Enum):
    """Lifecycle state of an agent."""

    IDLE = "idle"
    ACTIVE = "active"
    ASSIGNED = "assigned"


@dataclass
class AgentInfo:
    """Book-keeping record the agent manager holds for each agent."""

    agent_id: int
    agent_type: int
    status: AgentStatus
    creation_time: int
    last_status_change: int


def _describe(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


class Agent(ABC):
    """An actor with a post box that works through the engine's managers.

    Request methods return results as a list of tuples: ``[(True,)]`` on
    success and ``[(False, reason)]`` when the request was refused.
    """

    def __init__(self) -> None:
        self.post_box = PostBox()
        self.agent_id = -1
        self.agent_type = -1
        self.current_transaction = -1
        self.status = AgentStatus.IDLE
        self.started = False
        self.agent_manager: Any = None
        self.plugin_manager: Optional[PluginManager] = None
        self.postmaster: Optional[Postmaster] = None
        self.supervisors: List[int] = []
        self.subordinates: List[int] = []
        self.contacts: List[int] = []
        self.allowed_plugins: List[int] = []

    def start(self) -> None:
        self.status = AgentStatus.ACTIVE
        self.started = True

    def stop(self) -> None:
        self.status = AgentStatus.IDLE
        self.started = False

    @abstractmethod
    def clear_memory(self) -> None:
        """Drop per-job state before the agent goes back to its pool."""

    def _request(self, action: Callable[..., Any], *args: Any) -> List[tuple]:
        try:
            action(*args)
        except (OptiMAError, KeyError) as exc:
            return [(False, _describe(exc))]
        return [(True,)]

    def _query(self, action: Callable[..., Any], *args: Any) -> Any:
        try:
            return action(*args)
        except (OptiMAError, KeyError) as exc:
            return [(False, _describe(exc))]

    def operate_plugin(self, plugin_id: int, input_parameters: Any) -> Any:
        """Seize a plugin, run it on the input and release it."""
        instance = self.plugin_manager.seize_plugin(plugin_id, self.agent_type)
        try:
            return instance.operate(input_parameters)
        finally:
            self.plugin_manager.release_plugin(instance)

    def send_message(self, agent_id: int, msg: Message) -> List[tuple]:
        return self._request(
            self.postmaster.send_to_id, self.current_transaction, self.agent_id, self.agent_type, agent_id, msg
        )

    def send_message_to_all(self, agent_type: int, msg: Message) -> List[tuple]:
        return self._request(
            self.postmaster.send_to_type, self.current_transaction, self.agent_id, self.agent_type, agent_type, msg
        )

    def get_agent_info_by_id(self, agent_id: int) -> Any:
        return self._query(self.agent_manager.get_agent_info, self.agent_id, self.agent_type, agent_id)

    def get_agent_info_by_type(self, agent_type: int) -> Any:
        return self._query(self.agent_manager.get_agent_infos, self.agent_id, self.agent_type, agent_type)

    def create_agent(self, agent_type: int) -> List[tuple]:
        return self._request(
            self.agent_manager.request_create_agent,
            self.current_transaction, self.agent_id, self.agent_type, agent_type,
        )

    def create_and_start_agent(self, agent_type: int) -> List[tuple]:
        return self._request(
            self.agent_manager.request_create_and_start_agent,
            self.current_transaction, self.agent_id, self.agent_type, agent_type,
        )

    def destroy_agent(self, agent_id: int) -> List[tuple]:
        return self._request(
            self.agent_manager.request_destroy_agent,
            self.current_transaction, self.agent_id, self.agent_type, agent_id,
        )

    def start_agent(self, agent_id: int) -> List[tuple]:
        return self._request(
            self.agent_manager.request_start_agent,
            self.current_transaction, self.agent_id, self.agent_type, agent_id,
        )

    def stop_agent(self, agent_id: int) -> List[tuple]:
        return self._request(
            self.agent_manager.request_stop_agent,
            self.current_transaction, self.agent_id, self.agent_type, agent_id,
        )

    def check_messages(self) -> List[Message]:
        """Take every message waiting in this agent's post box."""
        return self.post_box.check_messages()


AgentFactory = Callable[[], Agent]


class AgentPool:
    """Creates agents of one type and recycles returned ones."""

    def __init__(
        self,
        factory: AgentFactory,
        agent_type: int,
        supervisors: Iterable[int],
        subordinates: Iterable[int],
        phone_book: Iterable[int],
        tool_box: Iterable[int],
        agent_manager: Any,
        plugin_manager: Optional[PluginManager],
        postmaster: Optional[Postmaster],
    ) -> None:
        self._factory = factory
        self.agent_type = agent_type
        self._supervisors = list(supervisors)
        self._subordinates = list(subordinates)
        self._phone_book = list(phone_book)
        self._tool_box = list(tool_box)
        self._agent_manager = agent_manager
        self._plugin_manager = plugin_manager
        self._postmaster = postmaster
        self.agents: List[Agent] = []
        self._available: Deque[Agent] = deque()
        self.in_use = 0

    def get_agent(self) -> Agent:
        """Reuse a returned agent or create and wire up a new one."""
        if self._available:
            agent = self._available.popleft()
        else:
            agent = self._factory()
            agent.supervisors = list(self._supervisors)
            agent.subordinates = list(self._subordinates)
            agent.contacts = list(self._phone_book)
            agent.allowed_plugins = list(self._tool_box)
            agent.agent_manager = self._agent_manager
            agent.plugin_manager = self._plugin_manager
            agent.postmaster = self._postmaster
            agent.current_transaction = -1
            self.agents.append(agent)
        agent.agent_type = self.agent_type
        self.in_use += 1
        return agent

    def return_agent(self, agent: Agent) -> None:
        """Clear the agent's memory and keep it for reuse."""
        agent.clear_memory()
        self._available.append(agent)
        self.in_use -= 1