"""Deferred execution of hook continuations.

Continuations never run on the call stack of the hook that requested
them. Inside a running asyncio loop they are handed to ``loop.call_soon``;
without one they go through a trampoline drained by its outermost caller.
"""

from __future__ import annotations

import asyncio

from collections import deque
from typing import Callable


__all__ = (
    "Scheduler",

    "call_soon",
    "run_deferred"
)


Scheduler = Callable[[Callable[[], None]], None]


_pending: deque[Callable[[], None]] = deque()
_draining = False


def run_deferred(callback: Callable[[], None]) -> None:
    global _draining

    _pending.append(callback)

    if _draining:
        return

    _draining = True

    try:
        while _pending:
            _pending.popleft()()
    finally:
        _draining = False


def call_soon(callback: Callable[[], None]) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        run_deferred(callback)

        return

    loop.call_soon(run_deferred, callback)
