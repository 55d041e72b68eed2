# src/taskplanner/core/ids.py

from __future__ import annotations

import itertools
import secrets
import threading
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out: list[str] = []
    while n:
        n, rem = divmod(n, 36)
        out.append(_ALPHABET[rem])
    return "".join(reversed(out))


class TimeRandomIdGenerator:
    """
    Opaque ids: base36 millisecond timestamp + process counter + random suffix.

    Ids are unique within the process even when many are created in the same
    millisecond (the counter never repeats).
    """

    def __init__(self) -> None:
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            seq = next(self._counter)
        ms = int(time.time() * 1000)
        return f"{_base36(ms)}{_base36(seq)}{secrets.token_hex(4)}"
