"""Estimates of how long a transaction will run."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from optima.exceptions import InvalidModelParameterError


class Estimator(ABC):
    """Predicts the running length of a transaction."""

    @abstractmethod
    def estimate_length(self, txn: Any) -> float:
        """The expected length of ``txn``."""


class DefaultEstimator(Estimator):
    """Looks lengths up in a statistics file of ``type,subtype,length`` lines.

    Transactions are matched on their ``type`` and ``sub_type`` attributes;
    unknown combinations get the average of all recorded lengths.
    """

    def __init__(self, stats_file_path: Union[str, Path]) -> None:
        self._averages: Dict[Tuple[int, int], float] = {}
        total = 0.0
        count = 0
        with Path(stats_file_path).open() as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                *keys, value_text = line.split(",")
                if len(keys) < 2:
                    raise InvalidModelParameterError(f"Malformed statistics line: {line!r}")
                value = float(value_text)
                if value <= 0:
                    raise InvalidModelParameterError("Transaction length must be greater than 0")
                self._averages[(int(keys[0]), int(keys[1]))] = value
                total += value
                count += 1
        if count == 0:
            raise InvalidModelParameterError("The statistics file holds no transaction lengths")
        self.general_average = total / count

    def estimate_length(self, txn: Any) -> float:
        return self._averages.get((txn.type, txn.sub_type), self.general_average)