import time

import pytest

from optima.agents import Agent
from optima.driver import Driver
from optima.estimator import DefaultEstimator, Estimator
from optima.exceptions import InvalidModelParameterError
from optima.model import MultiAgentModel, SchedulerSettings
from optima.transaction_factory import TransactionFactory
from optima.transaction_queue import TransactionResult, TransactionStatus


class _Worker(Agent):
    def clear_memory(self):
        pass


class _Step:
    def __init__(self, step, last):
        self.step = step
        self.last = last
        self.type = step % 2
        self.sub_type = 0
        self.id = None
        self.driver = None
        self.agent_manager = None
        self.postmaster = None
        self.length = None
        self.non_shareable_plugins = set()

    def find_non_shareable(self, plugin_manager):
        self.non_shareable_plugins = plugin_manager.non_shareable(set())

    def execute(self):
        agent = self.agent_manager.seize_agent(self.id, 0)
        time.sleep(0.001)
        self.agent_manager.release_agent(agent.agent_id)
        if self.step == self.last:
            self.driver.halt_program({"steps": self.last + 1})
        return TransactionResult(TransactionStatus.COMMITTED)


class _Chain(TransactionFactory):
    def __init__(self, count):
        super().__init__()
        self.count = count
        self.done = []

    def generate_initial_transactions(self):
        return [_Step(0, self.count - 1)]

    def generate_transactions(self, txn, result):
        self.done.append(txn.id)
        if txn.step + 1 < self.count:
            return [_Step(txn.step + 1, self.count - 1)]
        return []


class _Fixed(Estimator):
    def estimate_length(self, txn):
        return 1.0


class _RoundRobinScheduler:
    def __init__(self, settings, executor, non_shareable, thread_number):
        self.executor = executor
        self.thread_number = thread_number
        self.running = False
        self.queue = None

    def insert_transaction_queue(self, queue):
        self.queue = queue
        self.running = True

    def start_scheduling(self):
        while self.running:
            for index, txn in enumerate(self.queue.pull_all()):
                self.executor.assign_transaction(txn, index % self.thread_number)

    def close(self):
        self.running = False
        self.queue.trigger()


def _model(count):
    model = MultiAgentModel()
    model.add_agent_template(0, _Worker, 1, 2, True)
    factory = _Chain(count)
    model.set_transaction_factory(factory)
    model.set_thread_number(2)
    return model, factory


def test_plain_run_halts_with_output_and_writes_stats(tmp_path):
    stats_path = tmp_path / "stats.csv"
    model, factory = _model(4)
    model.keep_stats_file(stats_path)
    driver = Driver()
    driver.start_model(model)
    assert driver.get_output_parameters() == {"steps": 4}
    assert factory.done == [0, 1, 2, 3]

    lines = stats_path.read_text().splitlines()
    assert [tuple(line.split(",")[:2]) for line in lines] == [("0", "0"), ("1", "0")]
    estimator = DefaultEstimator(stats_path)
    assert estimator.estimate_length(_Step(0, 0)) > 0


def test_optimized_run_uses_scheduler():
    model, factory = _model(3)
    model.set_scheduler_settings(SchedulerSettings(optimized=True))
    model.set_estimator(_Fixed())
    model.set_batch_size(1)
    driver = Driver(scheduler_factory=_RoundRobinScheduler)
    driver.start_model(model)
    assert driver.get_output_parameters() == {"steps": 3}
    assert factory.done == [0, 1, 2]


def test_missing_transaction_factory():
    model = MultiAgentModel()
    model.add_agent_template(0, _Worker, 1, 1, True)
    with pytest.raises(InvalidModelParameterError, match="Transaction factory"):
        Driver().start_model(model)


def test_missing_initial_agents():
    model = MultiAgentModel()
    model.add_agent_template(0, _Worker, 1, 1, False)
    model.set_transaction_factory(_Chain(1))
    with pytest.raises(InvalidModelParameterError, match="None of the agents"):
        Driver().start_model(model)


def test_optimized_needs_estimator():
    model, _ = _model(1)
    model.set_scheduler_settings(SchedulerSettings(optimized=True))
    with pytest.raises(InvalidModelParameterError, match="estimator"):
        Driver(scheduler_factory=_RoundRobinScheduler).start_model(model)


def test_optimized_needs_scheduler():
    model, _ = _model(1)
    model.set_scheduler_settings(SchedulerSettings(optimized=True))
    model.set_estimator(_Fixed())
    with pytest.raises(InvalidModelParameterError, match="scheduler"):
        Driver().start_model(model)


def test_output_before_start_is_none():
    assert Driver().get_output_parameters() is None