from pathlib import Path

import pytest

from optima.agents import Agent
from optima.estimator import Estimator
from optima.exceptions import InvalidModelParameterError
from optima.model import MultiAgentModel, SchedulerSettings
from optima.plugin_manager import PluginInstance, PluginType


class _Worker(Agent):
    def clear_memory(self):
        pass


class _Tool(PluginInstance):
    def operate(self, input_parameters):
        return input_parameters


class _Fixed(Estimator):
    def estimate_length(self, txn):
        return 1.0


def _model():
    model = MultiAgentModel()
    model.add_agent_template(0, _Worker, 1, 3, True)
    model.add_agent_template(1, _Worker, 2, 2, False)
    model.add_plugin(5, _Tool, PluginType.NONSHAREABLE)
    return model


def test_agent_templates_are_recorded():
    model = _model()
    assert model.agent_core_ids == [0, 1]
    assert model.initial_numbers == [1, 2]
    assert model.maximum_numbers == [3, 2]
    assert model.initial_agents == [0]
    assert model.initial_agents_added is True


def test_no_initial_agents_without_start_flag():
    model = MultiAgentModel()
    model.add_agent_template(0, _Worker, 1, 1, False)
    assert model.initial_agents_added is False


def test_duplicate_template_rejected():
    model = _model()
    with pytest.raises(InvalidModelParameterError):
        model.add_agent_template(0, _Worker, 1, 1, True)


def test_supervisor_adds_relationship_and_communication():
    model = _model()
    model.add_supervisor(0, 1)
    assert model.relationships == [(0, 1)]
    assert model.communications == [(0, 1)]


@pytest.mark.parametrize(
    "pair, message",
    [((9, 1), "Supervisor id does not exist"), ((0, 9), "Subordinate id does not exist")],
)
def test_supervisor_unknown_ids(pair, message):
    model = _model()
    with pytest.raises(InvalidModelParameterError, match=message):
        model.add_supervisor(*pair)


def test_communication_requires_both_ids():
    model = _model()
    model.add_communication(1, 0)
    assert model.communications == [(1, 0)]
    with pytest.raises(InvalidModelParameterError, match="One of the template ids does not exist"):
        model.add_communication(1, 7)


def test_plugin_use_validation():
    model = _model()
    model.allow_plugin_use(1, 5)
    assert model.plugin_accesses == [(1, 5)]
    with pytest.raises(InvalidModelParameterError, match="Agent template id does not exist"):
        model.allow_plugin_use(4, 5)
    with pytest.raises(InvalidModelParameterError, match="Plugin id does not exist"):
        model.allow_plugin_use(0, 6)


def test_estimator_can_only_be_set_once():
    model = _model()
    estimator = _Fixed()
    model.set_estimator(estimator)
    assert model.estimator is estimator
    with pytest.raises(InvalidModelParameterError):
        model.set_estimator(_Fixed())


def test_default_estimator_blocks_later_estimator():
    model = _model()
    model.use_default_estimator("stats.csv")
    assert model.default_estimator is True
    assert model.default_estimator_file_path == Path("stats.csv")
    with pytest.raises(InvalidModelParameterError):
        model.set_estimator(_Fixed())


def test_engine_settings():
    model = _model()
    settings = SchedulerSettings(optimized=True)
    factory = object()
    model.set_scheduler_settings(settings)
    model.set_thread_number(4)
    model.set_batch_size(8)
    model.set_trigger()
    model.keep_stats_file("out.csv")
    model.set_transaction_factory(factory)
    assert model.scheduler_settings is settings and model.scheduler_settings_added
    assert model.thread_number == 4
    assert model.num_check and model.batch_size == 8
    assert model.trigger is True
    assert model.keep_stats and model.keep_stats_file_path == Path("out.csv")
    assert model.tfactory is factory and model.tfactory_set