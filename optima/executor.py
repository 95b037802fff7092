"""Worker threads that run transactions."""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, DefaultDict, Dict, Iterable, List, Optional

from optima.exceptions import InvalidModelParameterError
from optima.plugin_manager import PluginManager
from optima.transaction_queue import TransactionQueue


def _nested_float() -> DefaultDict[int, DefaultDict[int, float]]:
    return defaultdict(lambda: defaultdict(float))


def _nested_int() -> DefaultDict[int, DefaultDict[int, int]]:
    return defaultdict(lambda: defaultdict(int))


@dataclass
class ExecutorState:
    """Per-thread state: its queue, flags and timing statistics."""

    txn_queue: TransactionQueue = field(default_factory=TransactionQueue)
    optimized: bool = True
    started: bool = False
    running: bool = False
    total_times: DefaultDict[int, DefaultDict[int, float]] = field(default_factory=_nested_float)
    counts: DefaultDict[int, DefaultDict[int, int]] = field(default_factory=_nested_int)


class Executor:
    """Runs transactions on a fixed number of threads.

    Unoptimized, every thread pulls from the shared queue inserted with
    ``insert_transaction_queue``; optimized, each thread has its own queue
    filled by ``assign_transaction``. A transaction offers ``type``,
    ``sub_type``, ``non_shareable_plugins`` and ``execute()``.
    """

    def __init__(
        self,
        driver: Any,
        tfactory: Any,
        plugin_manager: PluginManager,
        thread_num: int,
        non_shareable_plugins: Iterable[int] = (),
        optimized: bool = False,
        trigger: bool = False,
        keep_stats: bool = False,
    ) -> None:
        if thread_num < 1:
            raise InvalidModelParameterError("Thread number must be at least 1")
        self.driver = driver
        self.thread_num = thread_num
        self.non_shareable_plugins = set(non_shareable_plugins)
        self.optimized = optimized
        self.trigger = trigger
        self.keep_stats = keep_stats
        self._tfactory = tfactory
        self._plugin_manager = plugin_manager
        self._plugin_locks: Dict[int, threading.Lock] = {
            p: threading.Lock() for p in plugin_manager.non_shareable()
        }
        self._txn_queue: Optional[TransactionQueue] = None
        self._listener: Any = None
        self.states: List[ExecutorState] = []
        self._threads: List[threading.Thread] = []

    def insert_transaction_queue(self, txn_queue: TransactionQueue) -> None:
        self._txn_queue = txn_queue

    def insert_listener(self, listener: Any) -> None:
        self._listener = listener

    def _execute(self, txn: Any, state: ExecutorState) -> None:
        if txn is None:
            return
        locks = [self._plugin_locks[p] for p in sorted(txn.non_shareable_plugins)]
        for lock in locks:
            lock.acquire()
        try:
            begin = time.monotonic_ns()
            result = txn.execute()
            if self.keep_stats:
                elapsed = time.monotonic_ns() - begin
                state.total_times[txn.type][txn.sub_type] += elapsed
                state.counts[txn.type][txn.sub_type] += 1
        finally:
            for lock in reversed(locks):
                lock.release()
        self._tfactory.post_process(txn, result)

    def _run(self, state: ExecutorState) -> None:
        while state.started:
            txn = state.txn_queue.pull()
            if self.trigger and self._listener is not None and state.txn_queue.is_empty():
                self._listener.trigger()
            self._execute(txn, state)

    def start(self) -> None:
        """Start the worker threads."""
        if self.optimized:
            self.states = [ExecutorState() for _ in range(self.thread_num)]
        else:
            if self._txn_queue is None:
                raise InvalidModelParameterError("No transaction queue has been inserted into the executor")
            self.states = [
                ExecutorState(txn_queue=self._txn_queue, optimized=False) for _ in range(self.thread_num)
            ]
        self._threads = []
        for state in self.states:
            state.started = True
            thread = threading.Thread(target=self._run, args=(state,), daemon=True)
            self._threads.append(thread)
            thread.start()

    def assign_transaction(self, txn: Any, index: int) -> None:
        """Queue a transaction for one particular thread."""
        state = self.states[index]
        state.txn_queue.push(txn)
        state.running = True

    def stop(self) -> None:
        """Let every thread finish its current transaction and end."""
        for state in self.states:
            state.started = False
        for state in self.states:
            state.txn_queue.exit()
        for thread in self._threads:
            thread.join()
        self._threads = []

    def get_stats(self) -> Dict[int, Dict[int, float]]:
        """Average running time in nanoseconds per transaction type and subtype."""
        totals: DefaultDict[int, DefaultDict[int, float]] = _nested_float()
        counts: DefaultDict[int, DefaultDict[int, int]] = _nested_int()
        for state in self.states:
            for txn_type, by_sub in state.total_times.items():
                for sub_type, total in by_sub.items():
                    totals[txn_type][sub_type] += total
                    counts[txn_type][sub_type] += state.counts[txn_type][sub_type]
        return {
            txn_type: {sub: total / counts[txn_type][sub] for sub, total in by_sub.items()}
            for txn_type, by_sub in totals.items()
        }