from dataclasses import dataclass

import pytest

from optima.estimator import DefaultEstimator, Estimator
from optima.exceptions import InvalidModelParameterError


@dataclass
class Txn:
    type: int
    sub_type: int


def write(tmp_path, text):
    path = tmp_path / "stats.csv"
    path.write_text(text)
    return path


def test_known_lengths(tmp_path):
    est = DefaultEstimator(write(tmp_path, "1,2,4.0\n3,4,8.0\n"))
    assert est.estimate_length(Txn(1, 2)) == 4.0
    assert est.estimate_length(Txn(3, 4)) == 8.0


def test_unknown_uses_general_average(tmp_path):
    est = DefaultEstimator(write(tmp_path, "1,2,4.0\n3,4,8.0\n"))
    assert est.estimate_length(Txn(9, 9)) == 6.0
    assert est.estimate_length(Txn(1, 9)) == est.general_average


def test_single_entry_average(tmp_path):
    est = DefaultEstimator(write(tmp_path, "0,0,2.5\n"))
    assert est.estimate_length(Txn(5, 5)) == 2.5


def test_accepts_path_string_and_blank_lines(tmp_path):
    path = write(tmp_path, "0,1,3\n\n")
    est = DefaultEstimator(str(path))
    assert est.estimate_length(Txn(0, 1)) == 3.0


@pytest.mark.parametrize("value", ["0", "-1.5"])
def test_non_positive_length_rejected(tmp_path, value):
    with pytest.raises(InvalidModelParameterError):
        DefaultEstimator(write(tmp_path, f"0,0,{value}\n"))


def test_empty_file_rejected(tmp_path):
    with pytest.raises(InvalidModelParameterError):
        DefaultEstimator(write(tmp_path, ""))


def test_custom_estimator_subclass():
    class Fixed(Estimator):
        def estimate_length(self, txn):
            return txn.type + 0.5

    assert Fixed().estimate_length(Txn(2, 0)) == 2.5
    with pytest.raises(TypeError):
        Estimator()