"""Builds the engine from a model, runs it and tears it down."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from optima.agent_manager import AgentManager
from optima.estimator import DefaultEstimator
from optima.exceptions import InvalidModelParameterError
from optima.executor import Executor
from optima.listener import Listener
from optima.model import MultiAgentModel, SchedulerSettings
from optima.plugin_manager import PluginManager

SchedulerFactory = Callable[[SchedulerSettings, Executor, set, int], Any]


class Driver:
    """Runs a multi-agent model until a transaction halts the program.

    Optimized scheduling needs ``scheduler_factory``: a callable taking the
    scheduler settings, the executor, the non-shareable plugin ids and the
    thread number, returning an object with ``insert_transaction_queue(queue)``,
    ``start_scheduling()`` (blocking until stopped) and ``close()``.
    """

    def __init__(self, scheduler_factory: Optional[SchedulerFactory] = None) -> None:
        self._scheduler_factory = scheduler_factory
        self._cond = threading.Condition()
        self._running = False
        self._output: Any = None
        self._optimized = False
        self._scheduler: Any = None
        self.starting_time: Optional[int] = None

    def start_model(self, model: MultiAgentModel) -> None:
        """Run the model; returns once the program has been halted."""
        self.starting_time = time.monotonic_ns()

        if not model.tfactory_set:
            raise InvalidModelParameterError("Transaction factory is not provided by the user")
        if not model.initial_agents_added:
            raise InvalidModelParameterError("None of the agents are allowed to start at in the beginning")

        if model.scheduler_settings_added:
            settings = model.scheduler_settings
            trigger = model.trigger
        else:
            settings = SchedulerSettings()
            trigger = False
        optimized = settings.optimized

        if optimized and not model.estimator_added:
            raise InvalidModelParameterError("Optimized model cannot be started unless an estimator is added")
        if optimized and self._scheduler_factory is None:
            raise InvalidModelParameterError("Optimized model cannot be started without a scheduler")

        plugin_manager = PluginManager(
            model.instance_factories, model.plugin_types, model.plugin_ids, model.plugin_accesses
        )
        agent_manager = AgentManager(
            model.agent_factories,
            model.agent_core_ids,
            model.initial_numbers,
            model.maximum_numbers,
            model.relationships,
            model.communications,
            model.plugin_accesses,
            model.initial_agents,
            plugin_manager,
            self.starting_time,
        )
        postmaster = agent_manager.postmaster
        agent_manager.start_initial_agents()

        tfactory = model.tfactory
        non_shareable = plugin_manager.non_shareable()
        executor = Executor(
            self, tfactory, plugin_manager, model.thread_number, non_shareable, optimized, trigger, model.keep_stats
        )

        if model.default_estimator:
            estimator = DefaultEstimator(model.default_estimator_file_path)
        else:
            estimator = model.estimator

        self._optimized = optimized
        self._scheduler = None
        if optimized:
            listener = Listener(
                self,
                agent_manager,
                plugin_manager,
                postmaster,
                estimator,
                trigger=trigger,
                batch_size=model.batch_size if model.num_check else None,
            )
            self._scheduler = self._scheduler_factory(settings, executor, non_shareable, model.thread_number)
            self._scheduler.insert_transaction_queue(listener.txn_queue)
        else:
            listener = Listener(self, agent_manager, plugin_manager, postmaster)
            executor.insert_transaction_queue(listener.txn_queue)

        tfactory.insert_listener(listener)
        executor.insert_listener(listener)

        with self._cond:
            self._running = True
            self._output = None
        executor.start()

        try:
            tfactory.initiate()
            if optimized:
                self._scheduler.start_scheduling()
            else:
                with self._cond:
                    self._cond.wait_for(lambda: not self._running)
        finally:
            self._end_processes(listener, executor, model)

    def _end_processes(self, listener: Listener, executor: Executor, model: MultiAgentModel) -> None:
        listener.txn_queue.exit()
        executor.stop()
        if model.keep_stats:
            stats = executor.get_stats()
            with model.keep_stats_file_path.open("w") as fh:
                for txn_type, by_sub in sorted(stats.items()):
                    for sub_type, average in sorted(by_sub.items()):
                        fh.write(f"{txn_type},{sub_type},{average}\n")
        listener.close()
        with self._cond:
            self._running = False
            self._cond.notify_all()

    def halt_program(self, output_parameters: Any = None) -> None:
        """Stop the running model and record what it produced."""
        with self._cond:
            self._output = output_parameters
            scheduler = self._scheduler if self._optimized else None
        if scheduler is not None:
            scheduler.close()
        with self._cond:
            self._running = False
            self._cond.notify_all()

    def get_output_parameters(self) -> Any:
        """Wait until the model has halted and return its output."""
        with self._cond:
            self._cond.wait_for(lambda: not self._running)
            return self._output