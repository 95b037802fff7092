"""Transactional delivery of messages between agents."""

from __future__ import annotations

import threading
import time
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from optima.exceptions import UnauthorizedAccessError
from optima.messaging import Message, PostBox


class Postmaster:
    """Logs messages per transaction and delivers them on commit."""

    def __init__(
        self,
        agent_ids: Mapping[int, Iterable[int]],
        communicators: Mapping[int, Iterable[int]],
        starting_time: Optional[int] = None,
    ) -> None:
        self._agent_ids: Dict[int, List[int]] = {t: list(ids) for t, ids in agent_ids.items()}
        self._communicators: Dict[int, List[int]] = {t: list(c) for t, c in communicators.items()}
        self._starting_time = time.monotonic_ns() if starting_time is None else starting_time
        self._post_boxes: Dict[int, Tuple[PostBox, int]] = {}
        self._log: Dict[int, List[Tuple[Message, PostBox]]] = {}
        self._post_lock = threading.Lock()
        self._log_lock = threading.Lock()

    def _may_send(self, receiver_type: int, sender_type: int) -> bool:
        return sender_type in self._communicators.get(receiver_type, ())

    def _enter_log(
        self,
        transaction_id: int,
        sender_id: int,
        sender_type: int,
        receiver_id: int,
        receiver_type: int,
        msg: Message,
        box: PostBox,
    ) -> None:
        addressed = replace(
            msg,
            sender_id=sender_id,
            sender_type=sender_type,
            receiver_id=receiver_id,
            receiver_type=receiver_type,
        )
        with self._log_lock:
            self._log.setdefault(transaction_id, []).append((addressed, box))

    def add_agent(self, agent_id: int, agent_type: int, postbox: PostBox) -> None:
        """Register an agent's post box."""
        with self._post_lock:
            self._post_boxes[agent_id] = (postbox, agent_type)
            self._agent_ids.setdefault(agent_type, []).append(agent_id)

    def remove_agent(self, agent_id: int, agent_type: int) -> None:
        """Forget an agent's post box."""
        with self._post_lock:
            self._post_boxes.pop(agent_id, None)
            ids = self._agent_ids.setdefault(agent_type, [])
            ids[:] = [i for i in ids if i != agent_id]

    def send_to_id(
        self, transaction_id: int, sender_id: int, sender_type: int, receiver_id: int, msg: Message
    ) -> None:
        """Log a message for one agent, delivered when the transaction commits."""
        with self._post_lock:
            entry = self._post_boxes.get(receiver_id)
            if entry is None:
                raise KeyError(f"no agent with id {receiver_id}")
            box, receiver_type = entry
            if not self._may_send(receiver_type, sender_type):
                raise UnauthorizedAccessError(
                    "The sender is not autorized to communicate with this type of agent"
                )
            self._enter_log(transaction_id, sender_id, sender_type, receiver_id, receiver_type, msg, box)

    def send_to_type(
        self, transaction_id: int, sender_id: int, sender_type: int, receiver_type: int, msg: Message
    ) -> None:
        """Log a message for every agent of a type."""
        if not self._may_send(receiver_type, sender_type):
            raise UnauthorizedAccessError(
                "The sender is not autorized to communicate with this type of agent"
            )
        with self._post_lock:
            for receiver_id in self._agent_ids.get(receiver_type, ()):
                box = self._post_boxes[receiver_id][0]
                self._enter_log(transaction_id, sender_id, sender_type, receiver_id, receiver_type, msg, box)

    def commit(self, transaction_id: int) -> None:
        """Deliver every message logged by the transaction."""
        with self._log_lock:
            for msg, box in self._log.pop(transaction_id, []):
                msg.time_stamp = time.monotonic_ns() - self._starting_time
                box.send_message(msg)

    def rollback(self, transaction_id: int) -> None:
        """Discard every message logged by the transaction."""
        with self._log_lock:
            self._log.pop(transaction_id, None)