"""Creation, lifecycle and transactional bookkeeping of agents."""

from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from optima.agents import Agent, AgentFactory, AgentInfo, AgentPool, AgentStatus
from optima.exceptions import AgentLimitError, AgentUnavailableError, UnauthorizedAccessError
from optima.plugin_manager import PluginManager
from optima.postmaster import Postmaster

AgentRecord = Tuple[int, int, AgentStatus, int, int]


class AgentOperation(Enum):
    """A lifecycle change requested inside a transaction."""

    CREATE = "create"
    CREATE_AND_START = "create_and_start"
    DESTROY = "destroy"
    START = "start"
    STOP = "stop"


class AgentManager:
    """Owns every agent; lifecycle requests are logged and applied on commit."""

    def __init__(
        self,
        agent_factories: Sequence[AgentFactory],
        agent_types: Sequence[int],
        initial_numbers: Sequence[int],
        max_numbers: Sequence[int],
        relationships: Iterable[Tuple[int, int]] = (),
        communications: Iterable[Tuple[int, int]] = (),
        plugin_accesses: Iterable[Tuple[int, int]] = (),
        initial_agents: Iterable[int] = (),
        plugin_manager: Optional[PluginManager] = None,
        starting_time: Optional[int] = None,
    ) -> None:
        self._starting_time = time.monotonic_ns() if starting_time is None else starting_time
        self._initial_agents = list(initial_agents)
        self._agent_lock = threading.RLock()
        self._log_lock = threading.Lock()
        self._log: Dict[int, List[Tuple[AgentOperation, int]]] = {}
        self._agent_count = 0

        self._max_numbers: Dict[int, int] = {}
        self._current_numbers: Dict[int, int] = {}
        self._supervisors: Dict[int, List[int]] = {}
        self._subordinates: Dict[int, List[int]] = {}
        self._tools: Dict[int, List[int]] = {}
        self._agent_ids: Dict[int, List[int]] = {}
        self._agents: Dict[int, Tuple[Agent, int]] = {}
        self._infos: Dict[int, AgentInfo] = {}
        self._pools: Dict[int, AgentPool] = {}
        communicators: Dict[int, List[int]] = {}

        for agent_type, maximum, initial in zip(agent_types, max_numbers, initial_numbers, strict=True):
            self._max_numbers[agent_type] = maximum
            self._current_numbers[agent_type] = initial
            self._supervisors[agent_type] = []
            self._subordinates[agent_type] = []
            self._tools[agent_type] = []
            self._agent_ids[agent_type] = []
            communicators[agent_type] = []

        for supervisor, subordinate in relationships:
            self._supervisors.setdefault(subordinate, []).append(supervisor)
            self._subordinates.setdefault(supervisor, []).append(subordinate)

        for first, second in communications:
            communicators.setdefault(first, []).append(second)
            communicators.setdefault(second, []).append(first)

        for agent_type, plugin_id in plugin_accesses:
            self._tools.setdefault(agent_type, []).append(plugin_id)

        self.postmaster = Postmaster({t: [] for t in agent_types}, communicators, self._starting_time)

        for factory, agent_type, initial in zip(agent_factories, agent_types, initial_numbers, strict=True):
            self._pools[agent_type] = AgentPool(
                factory,
                agent_type,
                self._supervisors[agent_type],
                self._subordinates[agent_type],
                communicators[agent_type],
                self._tools[agent_type],
                self,
                plugin_manager,
                self.postmaster,
            )
            for _ in range(initial):
                self._register_new_agent(agent_type)

    def _now(self) -> int:
        return time.monotonic_ns() - self._starting_time

    def _register_new_agent(self, agent_type: int) -> Agent:
        agent_id = self._agent_count
        agent = self._pools[agent_type].get_agent()
        agent.agent_id = agent_id
        self._agents[agent_id] = (agent, agent_type)
        now = self._now()
        self._infos[agent_id] = AgentInfo(agent_id, agent_type, AgentStatus.IDLE, now, now)
        self._agent_ids[agent_type].append(agent_id)
        self.postmaster.add_agent(agent_id, agent_type, agent.post_box)
        self._agent_count += 1
        return agent

    def _entry(self, agent_id: int) -> Tuple[Agent, int]:
        try:
            return self._agents[agent_id]
        except KeyError:
            raise KeyError(f"No agent with id {agent_id}") from None

    def _may_manage(self, sender_type: int, target_type: int) -> bool:
        return sender_type in self._supervisors.get(target_type, ())

    def _enter_log(self, transaction_id: int, operation: AgentOperation, parameter: int) -> None:
        with self._log_lock:
            self._log.setdefault(transaction_id, []).append((operation, parameter))

    def _check_capacity(self, target_type: int) -> None:
        if self._current_numbers[target_type] == self._max_numbers[target_type]:
            raise AgentLimitError("Maximum number of agents for this agent type is exceeded.")

    def seize_agent(self, transaction_id: int, agent_type: int) -> Agent:
        """Assign the first active agent of a type to a transaction."""
        with self._agent_lock:
            for agent_id in self._agent_ids[agent_type]:
                info = self._infos[agent_id]
                if info.status is AgentStatus.ACTIVE:
                    info.status = AgentStatus.ASSIGNED
                    agent = self._agents[agent_id][0]
                    agent.current_transaction = transaction_id
                    return agent
        raise AgentUnavailableError("No available agent of the given type exists")

    def release_agent(self, agent_id: int) -> None:
        """Free an assigned agent so other transactions may seize it."""
        with self._agent_lock:
            self._infos[agent_id].status = AgentStatus.ACTIVE
            self._entry(agent_id)[0].current_transaction = -1

    def transfer_ownership(self, transaction_id: int, agent_id: int) -> None:
        """Hand an agent over to another transaction."""
        with self._agent_lock:
            self._entry(agent_id)[0].current_transaction = transaction_id

    def request_create_agent(self, transaction_id: int, sender_id: int, sender_type: int, target_type: int) -> None:
        if not self._may_manage(sender_type, target_type):
            raise UnauthorizedAccessError("The sender is not autorized to create this type of agent")
        with self._agent_lock:
            self._check_capacity(target_type)
            self._enter_log(transaction_id, AgentOperation.CREATE, target_type)

    def request_create_and_start_agent(
        self, transaction_id: int, sender_id: int, sender_type: int, target_type: int
    ) -> None:
        if not self._may_manage(sender_type, target_type):
            raise UnauthorizedAccessError("The sender is not autorized to create this type of agent")
        with self._agent_lock:
            self._check_capacity(target_type)
            self._enter_log(transaction_id, AgentOperation.CREATE_AND_START, target_type)

    def request_start_agent(self, transaction_id: int, sender_id: int, sender_type: int, target_id: int) -> None:
        with self._agent_lock:
            target_type = self._entry(target_id)[1]
            if not self._may_manage(sender_type, target_type):
                raise UnauthorizedAccessError("The sender is not autorized to start this type of agent")
            self._enter_log(transaction_id, AgentOperation.START, target_id)

    def request_stop_agent(self, transaction_id: int, sender_id: int, sender_type: int, target_id: int) -> None:
        with self._agent_lock:
            target_type = self._entry(target_id)[1]
            if sender_id != target_id:
                if not self._may_manage(sender_type, target_type):
                    raise UnauthorizedAccessError("The sender is not autorized to stop this type of agent")
                if self._infos[target_id].status is AgentStatus.ASSIGNED:
                    raise UnauthorizedAccessError(
                        "The agent cannot be stopped because it is assigned to a transaction"
                    )
            self._enter_log(transaction_id, AgentOperation.STOP, target_id)

    def request_destroy_agent(self, transaction_id: int, sender_id: int, sender_type: int, target_id: int) -> None:
        with self._agent_lock:
            agent, target_type = self._entry(target_id)
            if not self._may_manage(sender_type, target_type):
                raise UnauthorizedAccessError("The sender is not autorized to destroy this type of agent")
            if agent.status is not AgentStatus.IDLE:
                raise UnauthorizedAccessError("The agent cannot be destroyed because it is not idle.")
            self._enter_log(transaction_id, AgentOperation.DESTROY, target_id)

    def create_agent(self, target_type: int) -> int:
        """Create an idle agent of a type and return its id."""
        with self._agent_lock:
            self._current_numbers[target_type] += 1
            return self._register_new_agent(target_type).agent_id

    def create_and_start_agent(self, target_type: int) -> int:
        """Create an agent of a type, start it and return its id."""
        with self._agent_lock:
            agent_id = self.create_agent(target_type)
            self.start_agent(agent_id)
            return agent_id

    def start_agent(self, target_id: int) -> None:
        with self._agent_lock:
            self._entry(target_id)[0].start()
            info = self._infos[target_id]
            info.status = AgentStatus.ACTIVE
            info.last_status_change = self._now()

    def stop_agent(self, target_id: int) -> None:
        with self._agent_lock:
            self._entry(target_id)[0].stop()
            info = self._infos[target_id]
            info.status = AgentStatus.IDLE
            info.last_status_change = self._now()

    def destroy_agent(self, target_id: int) -> None:
        """Remove an agent for good."""
        with self._agent_lock:
            agent, target_type = self._entry(target_id)
            self._current_numbers[target_type] -= 1
            del self._agents[target_id]
            del self._infos[target_id]
            ids = self._agent_ids[target_type]
            ids[:] = [i for i in ids if i != target_id]
            pool_agents = self._pools[target_type].agents
            if agent in pool_agents:
                pool_agents.remove(agent)
            self.postmaster.remove_agent(target_id, target_type)

    @staticmethod
    def _record(info: AgentInfo) -> AgentRecord:
        return (info.agent_id, info.agent_type, info.status, info.creation_time, info.last_status_change)

    def get_agent_info(self, sender_id: int, sender_type: int, target_id: int) -> List[AgentRecord]:
        """One record ``(id, type, status, creation_time, last_status_change)``."""
        with self._agent_lock:
            target_type = self._entry(target_id)[1]
            if not self._may_manage(sender_type, target_type):
                raise UnauthorizedAccessError(
                    "The sender is not autorized to access info of this type of agent"
                )
            return [self._record(self._infos[target_id])]

    def get_agent_infos(self, sender_id: int, sender_type: int, target_type: int) -> List[AgentRecord]:
        """Records of every agent of a type, in creation order."""
        if not self._may_manage(sender_type, target_type):
            raise UnauthorizedAccessError("The sender is not autorized to access info of this type of agent")
        with self._agent_lock:
            return [self._record(self._infos[i]) for i in self._agent_ids[target_type]]

    def commit(self, transaction_id: int) -> None:
        """Apply every lifecycle change the transaction requested."""
        with self._log_lock:
            operations = self._log.pop(transaction_id, [])
        handlers: Dict[AgentOperation, Callable[[int], object]] = {
            AgentOperation.CREATE: self.create_agent,
            AgentOperation.CREATE_AND_START: self.create_and_start_agent,
            AgentOperation.DESTROY: self.destroy_agent,
            AgentOperation.START: self.start_agent,
            AgentOperation.STOP: self.stop_agent,
        }
        for operation, parameter in operations:
            handlers[operation](parameter)

    def rollback(self, transaction_id: int) -> None:
        """Discard every lifecycle change the transaction requested."""
        with self._log_lock:
            self._log.pop(transaction_id, None)

    def start_initial_agents(self) -> None:
        """Start every agent of the types allowed to run from the beginning."""
        with self._agent_lock:
            for agent_type in self._initial_agents:
                for agent_id in self._agent_ids[agent_type]:
                    self._agents[agent_id][0].start()
                    self._infos[agent_id].status = AgentStatus.ACTIVE