"""Messages exchanged between agents and the post boxes that hold them."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional


@dataclass
class Message:
    """A message with an optional prompt and parameters.

    Addressing fields and the time stamp are filled in by the postmaster.
    """

    prompt: str = ""
    parameters: Any = None
    sender_id: Optional[int] = None
    sender_type: Optional[int] = None
    receiver_id: Optional[int] = None
    receiver_type: Optional[int] = None
    time_stamp: Optional[int] = None


class PostBox:
    """A thread-safe inbox belonging to one agent."""

    def __init__(self) -> None:
        self._messages: Deque[Message] = deque()
        self._lock = threading.Lock()

    def send_message(self, msg: Message) -> None:
        """Deliver a message into this box."""
        with self._lock:
            self._messages.append(msg)

    def check_messages(self) -> List[Message]:
        """Remove and return every waiting message, oldest first."""
        with self._lock:
            res = list(self._messages)
            self._messages.clear()
        return res

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)