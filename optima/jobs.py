"""Factory-floor jobs and their random generation, saving and loading."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Deque, List, Optional, Sequence, Tuple, Union

from optima.exceptions import InvalidModelParameterError
from optima.random_numbers import UniformRandom


class OperationType(IntEnum):
    MANUAL = 0
    DRILLING = 1
    WELDING = 2


Operation = Tuple[OperationType, int]


@dataclass
class Job:
    """A job: a queue of transactions, each a list of operations."""

    id: int
    operations: Deque[List[Operation]] = field(default_factory=deque)
    is_successful: bool = False


def parse_job_line(line: str) -> List[List[Operation]]:
    """Parse one saved job line such as ``0|1,1|0;2|1;``."""
    line = line.rstrip("\r\n")
    segments = line.split(";")
    if len(segments) > 1 and segments[-1] == "":
        segments.pop()
    current: Optional[OperationType] = None
    res: List[List[Operation]] = []
    for segment in segments:
        ops: List[Operation] = []
        for item in filter(None, segment.split(",")):
            if "|" in item:
                kind, _, item = item.partition("|")
                current = OperationType(int(kind))
            if current is None:
                raise ValueError(f"operation without type in job line: {line!r}")
            ops.append((current, int(item)))
        res.append(ops)
    return res


def format_job(job: Job) -> str:
    """Render a job as one line of the saved format, without newline."""
    return "".join(
        ",".join(f"{int(kind)}|{sub}" for kind, sub in txn) + ";" for txn in job.operations
    )


class JobCreator:
    """Generates random jobs, optionally saving them, or loads saved ones."""

    def __init__(
        self,
        job_num: int,
        min_transaction_num: int,
        max_transaction_num: int,
        min_operation_num: int,
        max_operation_num: int,
        manual_coef: float = 1.0,
        drilling_coef: float = 1.0,
        welding_coef: float = 1.0,
        manual_operation_coefs: Sequence[float] = (1, 1, 1, 1, 1),
        drilling_operation_coefs: Sequence[float] = (1, 1),
        welding_operation_coefs: Sequence[float] = (1, 1),
        file_path: Union[str, Path, None] = None,
        seed: Optional[int] = None,
    ) -> None:
        if len(manual_operation_coefs) != 5:
            raise InvalidModelParameterError("Number of coefficients must be equal to 5")
        self.job_num = job_num
        self._save_path = Path(file_path) if file_path is not None else None
        self._source_path: Optional[Path] = None

        seeds = (None, None, None) if seed is None else (seed, seed + 1, seed + 2)
        self._txn_random = UniformRandom(min_transaction_num, max_transaction_num + 1, seeds[0])
        self._operation_random = UniformRandom(min_operation_num, max_operation_num + 1, seeds[1])
        self._probability_random = UniformRandom(0, 1, seeds[2])

        total = manual_coef + drilling_coef + welding_coef
        self._manual_prob = manual_coef / total
        self._drilling_prob = drilling_coef / total + self._manual_prob

        manual_total = sum(manual_operation_coefs)
        cumulative = 0.0
        self._manual_operation_probs: List[float] = []
        for coef in manual_operation_coefs[:4]:
            cumulative += coef / manual_total
            self._manual_operation_probs.append(cumulative)
        self._manual_operation_probs.append(1.0)

        self._drilling_first_prob = drilling_operation_coefs[0] / sum(drilling_operation_coefs[:2])
        self._welding_first_prob = welding_operation_coefs[0] / sum(welding_operation_coefs[:2])

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "JobCreator":
        """A creator that reads previously saved jobs instead of generating."""
        creator = cls(0, 0, 0, 0, 0)
        creator._source_path = Path(file_path)
        return creator

    def create_jobs(self) -> List[Job]:
        if self._source_path is not None:
            with self._source_path.open() as fh:
                return [
                    Job(index, deque(parse_job_line(line)))
                    for index, line in enumerate(fh)
                ]
        jobs = [self._generate_job(index) for index in range(self.job_num)]
        if self._save_path is not None:
            with self._save_path.open("w") as fh:
                fh.writelines(format_job(job) + "\n" for job in jobs)
        return jobs

    def _generate_job(self, job_id: int) -> Job:
        job = Job(job_id)
        for _ in range(int(self._txn_random.generate())):
            ops = [self._generate_operation() for _ in range(int(self._operation_random.generate()))]
            job.operations.append(ops)
        return job

    def _generate_operation(self) -> Operation:
        p = self._probability_random.generate()
        q = self._probability_random.generate()
        if p < self._manual_prob:
            sub = next(i for i, limit in enumerate(self._manual_operation_probs) if q < limit)
            return OperationType.MANUAL, sub
        if p < self._drilling_prob:
            return OperationType.DRILLING, 0 if q < self._drilling_first_prob else 1
        return OperationType.WELDING, 0 if q < self._welding_first_prob else 1