"""Entry point through which new transactions reach the engine."""

from __future__ import annotations

import threading
from typing import Any, Optional

from optima.estimator import Estimator
from optima.plugin_manager import PluginManager
from optima.transaction_queue import TransactionQueue


class Listener:
    """Numbers incoming transactions, wires them to the engine and queues them.

    A transaction is expected to offer writable ``id``, ``driver``,
    ``agent_manager``, ``postmaster`` and ``length`` attributes and a
    ``find_non_shareable(plugin_manager)`` method.

    With an estimator the listener works for an optimizing scheduler: lengths
    are estimated, pushes are silent and the queue is triggered for the first
    transaction, after every ``batch_size`` transactions, and whenever
    ``trigger`` is called while a trigger thread runs.
    """

    def __init__(
        self,
        driver: Any,
        agent_manager: Any,
        plugin_manager: PluginManager,
        postmaster: Any,
        estimator: Optional[Estimator] = None,
        trigger: bool = False,
        batch_size: Optional[int] = None,
    ) -> None:
        self.driver = driver
        self.agent_manager = agent_manager
        self.plugin_manager = plugin_manager
        self.postmaster = postmaster
        self.estimator = estimator
        self.optimized = estimator is not None
        self.batch_size = batch_size
        self.txn_queue = TransactionQueue()

        self._lock = threading.Lock()
        self._running = True
        self._transaction_count = 0
        self._current_num = 0
        self._initial = True

        self._trigger_cond = threading.Condition()
        self._triggered = False
        self._trigger_thread: Optional[threading.Thread] = None
        if self.optimized and trigger:
            self._trigger_thread = threading.Thread(target=self._check_trigger, daemon=True)
            self._trigger_thread.start()

    def _check_trigger(self) -> None:
        while self._running:
            with self._trigger_cond:
                self._trigger_cond.wait_for(lambda: self._triggered)
                self._triggered = False
            self.txn_queue.trigger()

    def send_transaction(self, txn: Any) -> None:
        """Accept a new transaction; ignored once the listener is closed."""
        with self._lock:
            if not self._running:
                return
            txn.id = self._transaction_count
            self._transaction_count += 1
            txn.driver = self.driver
            txn.agent_manager = self.agent_manager
            txn.postmaster = self.postmaster
            txn.find_non_shareable(self.plugin_manager)

            if self.optimized:
                txn.length = self.estimator.estimate_length(txn)
                self.txn_queue.silent_push(txn)
                batch_full = self.batch_size is not None and self._current_num >= self.batch_size
                if batch_full or self._initial:
                    self._initial = False
                    self._current_num = 0
                    self.txn_queue.trigger()
            else:
                self.txn_queue.push(txn)

            self._current_num += 1

    def trigger(self) -> None:
        """Ask the trigger thread to release the scheduler's next batch."""
        with self._trigger_cond:
            self._triggered = True
            self._trigger_cond.notify_all()

    def close(self) -> None:
        """Stop accepting transactions and end the trigger thread."""
        with self._lock:
            self._running = False
        self.trigger()
        if self._trigger_thread is not None:
            self._trigger_thread.join()
            self._trigger_thread = None

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()