import pytest

from optima.exceptions import UnauthorizedAccessError
from optima.plugin_manager import PluginInstance, PluginManager, PluginType


class Echo(PluginInstance):
    def operate(self, input_parameters):
        return [(self.plugin_id, input_parameters)]


@pytest.fixture
def manager():
    return PluginManager(
        [Echo, Echo, Echo],
        [PluginType.SHAREABLE, PluginType.NONSHAREABLE, PluginType.NONSHAREABLE],
        [10, 20, 30],
        [(1, 10), (1, 20), (2, 20)],
    )


def test_plugin_instance_is_abstract():
    with pytest.raises(TypeError):
        PluginInstance()


def test_seize_shareable_returns_same_instance(manager):
    first = manager.seize_plugin(10, 1)
    second = manager.seize_plugin(10, 1)
    assert first is second
    assert first.plugin_id == 10
    assert first.operate("x") == [(10, "x")]


def test_seize_by_disallowed_type_raises(manager):
    with pytest.raises(UnauthorizedAccessError):
        manager.seize_plugin(10, 2)


def test_seize_unknown_plugin_raises(manager):
    with pytest.raises(UnauthorizedAccessError):
        manager.seize_plugin(99, 1)


def test_nonshareable_cannot_be_seized_twice(manager):
    manager.seize_plugin(20, 1)
    with pytest.raises(UnauthorizedAccessError):
        manager.seize_plugin(20, 2)


def test_release_frees_nonshareable(manager):
    instance = manager.seize_plugin(20, 1)
    manager.release_plugin(instance)
    assert manager.seize_plugin(20, 2) is instance


def test_non_shareable_all(manager):
    assert manager.non_shareable() == {20, 30}


def test_non_shareable_filtered(manager):
    assert manager.non_shareable([10, 20]) == {20}
    assert manager.non_shareable([10, 99]) == set()


def test_non_shareable_returns_copy(manager):
    result = manager.non_shareable()
    result.add(10)
    assert manager.non_shareable() == {20, 30}


def test_mismatched_lengths_raise():
    with pytest.raises(ValueError):
        PluginManager([Echo], [PluginType.SHAREABLE, PluginType.SHAREABLE], [1, 2])