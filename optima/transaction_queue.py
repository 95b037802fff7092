"""Transaction results and the blocking queue that feeds executors."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, List, Optional


class TransactionStatus(Enum):
    """Outcome of an executed transaction."""

    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class TransactionResult:
    """What a transaction reports after running."""

    status: TransactionStatus
    error_message: Optional[str] = None
    result_parameters: Any = None


class TransactionQueue:
    """A FIFO of transactions with blocking pulls, batch pulls and shutdown."""

    def __init__(self) -> None:
        self._items: Deque[Any] = deque()
        self._cond = threading.Condition()
        self._triggered = False
        self._exit = False

    def silent_push(self, txn: Any) -> None:
        """Enqueue without waking any waiter."""
        with self._cond:
            self._items.append(txn)

    def push(self, txn: Any) -> None:
        """Enqueue and wake a waiting puller."""
        with self._cond:
            self._items.append(txn)
            self._cond.notify_all()

    def pull(self) -> Any:
        """Block until an item is available; return None once exited."""
        with self._cond:
            self._cond.wait_for(lambda: bool(self._items) or self._exit)
            if self._exit:
                return None
            return self._items.popleft()

    def pull_all(self) -> List[Any]:
        """Block until triggered, then drain the queue; empty once exited."""
        with self._cond:
            self._cond.wait_for(lambda: self._triggered or self._exit)
            if self._exit:
                return []
            res = list(self._items)
            self._items.clear()
            self._triggered = False
            return res

    def is_empty(self) -> bool:
        with self._cond:
            return not self._items

    def trigger(self) -> None:
        """Release a waiting batch pull."""
        with self._cond:
            self._triggered = True
            self._cond.notify_all()

    def exit(self) -> None:
        """Release every waiter for good."""
        with self._cond:
            self._exit = True
            self._cond.notify_all()