"""User hook that decides which transactions run next."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List

from optima.transaction_queue import TransactionResult


class TransactionFactory(ABC):
    """Produces the first transactions and the follow-ups of finished ones."""

    def __init__(self) -> None:
        self.listener: Any = None

    @abstractmethod
    def generate_initial_transactions(self) -> List[Any]:
        """Transactions to run when the model starts."""

    @abstractmethod
    def generate_transactions(self, txn: Any, result: TransactionResult) -> List[Any]:
        """Transactions to run after ``txn`` finished with ``result``."""

    def _send_all(self, txns: List[Any]) -> None:
        if self.listener is None:
            raise RuntimeError("No listener has been inserted into the transaction factory")
        for txn in txns:
            self.listener.send_transaction(txn)

    def initiate(self) -> None:
        """Send the initial transactions to the listener."""
        self._send_all(self.generate_initial_transactions())

    def post_process(self, txn: Any, result: TransactionResult) -> None:
        """Send the follow-ups of a finished transaction to the listener."""
        self._send_all(self.generate_transactions(txn, result))

    def insert_listener(self, listener: Any) -> None:
        self.listener = listener