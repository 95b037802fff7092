"""Declarative description of a multi-agent model that a driver can run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from optima.agents import AgentFactory
from optima.estimator import Estimator
from optima.exceptions import InvalidModelParameterError
from optima.plugin_manager import PluginFactory, PluginType


@dataclass
class SchedulerSettings:
    """How transactions are handed to the executor threads."""

    optimized: bool = False
    permuted: bool = False
    optimization_method: Optional[str] = None
    dp_solution_type: Optional[str] = None
    sa_decrement_type: Optional[str] = None
    sa_decrement_parameter: float = 0.0
    sa_max_temperature: float = 0.0


class MultiAgentModel:
    """Agent templates, plugins, their relations and the engine settings."""

    def __init__(self) -> None:
        self.agent_factories: List[AgentFactory] = []
        self.agent_core_ids: List[int] = []
        self.initial_numbers: List[int] = []
        self.maximum_numbers: List[int] = []
        self.initial_agents: List[int] = []

        self.instance_factories: List[PluginFactory] = []
        self.plugin_types: List[PluginType] = []
        self.plugin_ids: List[int] = []

        self.relationships: List[Tuple[int, int]] = []
        self.communications: List[Tuple[int, int]] = []
        self.plugin_accesses: List[Tuple[int, int]] = []

        self.scheduler_settings: Optional[SchedulerSettings] = None
        self.scheduler_settings_added = False

        self.estimator: Optional[Estimator] = None
        self.estimator_added = False
        self.default_estimator = False
        self.default_estimator_file_path: Optional[Path] = None

        self.thread_number = 1
        self.batch_size: Optional[int] = None
        self.num_check = False
        self.trigger = False

        self.keep_stats = False
        self.keep_stats_file_path: Optional[Path] = None

        self.tfactory: Any = None
        self.tfactory_set = False

    @property
    def initial_agents_added(self) -> bool:
        """Whether any agent type is allowed to run from the start."""
        return bool(self.initial_agents)

    def add_agent_template(
        self,
        template_id: int,
        factory: AgentFactory,
        initial_number: int,
        maximum_number: int,
        start_initially: bool,
    ) -> None:
        """Register an agent type built by ``factory``."""
        if template_id in self.agent_core_ids:
            raise InvalidModelParameterError("Agent template id already exists")
        self.agent_core_ids.append(template_id)
        self.agent_factories.append(factory)
        self.initial_numbers.append(initial_number)
        self.maximum_numbers.append(maximum_number)
        if start_initially:
            self.initial_agents.append(template_id)

    def add_plugin(self, plugin_id: int, factory: PluginFactory, plugin_type: PluginType) -> None:
        """Register a plugin built by ``factory``."""
        if plugin_id in self.plugin_ids:
            raise InvalidModelParameterError("Plugin id already exists")
        self.plugin_ids.append(plugin_id)
        self.instance_factories.append(factory)
        self.plugin_types.append(plugin_type)

    def add_supervisor(self, supervisor_id: int, subordinate_id: int) -> None:
        """Let one agent type manage another; they may also message each other."""
        if supervisor_id not in self.agent_core_ids:
            raise InvalidModelParameterError("Supervisor id does not exist")
        if subordinate_id not in self.agent_core_ids:
            raise InvalidModelParameterError("Subordinate id does not exist")
        self.relationships.append((supervisor_id, subordinate_id))
        self.communications.append((supervisor_id, subordinate_id))

    def add_communication(self, template_id1: int, template_id2: int) -> None:
        """Let two agent types message each other."""
        if template_id1 not in self.agent_core_ids or template_id2 not in self.agent_core_ids:
            raise InvalidModelParameterError("One of the template ids does not exist")
        self.communications.append((template_id1, template_id2))

    def set_estimator(self, estimator: Estimator) -> None:
        if self.estimator_added:
            raise InvalidModelParameterError("An estimator object has already been added")
        self.estimator_added = True
        self.default_estimator = False
        self.estimator = estimator

    def allow_plugin_use(self, agent_template_id: int, plugin_id: int) -> None:
        if agent_template_id not in self.agent_core_ids:
            raise InvalidModelParameterError("Agent template id does not exist")
        if plugin_id not in self.plugin_ids:
            raise InvalidModelParameterError("Plugin id does not exist")
        self.plugin_accesses.append((agent_template_id, plugin_id))

    def set_scheduler_settings(self, settings: SchedulerSettings) -> None:
        self.scheduler_settings = settings
        self.scheduler_settings_added = True

    def set_thread_number(self, thread_number: int) -> None:
        self.thread_number = thread_number

    def set_transaction_factory(self, tfactory: Any) -> None:
        self.tfactory = tfactory
        self.tfactory_set = True

    def set_batch_size(self, batch_size: int) -> None:
        self.num_check = True
        self.batch_size = batch_size

    def set_trigger(self) -> None:
        self.trigger = True

    def keep_stats_file(self, stats_file_path: Union[str, Path]) -> None:
        """Write average transaction lengths to this file when the run ends."""
        self.keep_stats = True
        self.keep_stats_file_path = Path(stats_file_path)

    def use_default_estimator(self, stats_file_path: Union[str, Path]) -> None:
        """Estimate lengths from a statistics file written by an earlier run."""
        self.default_estimator = True
        self.estimator_added = True
        self.default_estimator_file_path = Path(stats_file_path)