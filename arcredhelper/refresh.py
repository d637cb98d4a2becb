#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Run a credential update now, then again on an interval."""

from __future__ import annotations

import time
import signal
import threading
from typing import Callable
from contextlib import contextmanager

from arcredhelper.logger import LOG
from arcredhelper.exceptions import RefreshError, CredHelperError


class RefreshLoop:
    """Repeat ``task`` every ``interval`` seconds until ``duration`` elapses.

    The loop stops quietly once the duration is over or the stop event is
    set, and raises RefreshError as soon as one refresh fails.
    """

    def __init__(
        self,
        interval: float,
        duration: float,
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interval = interval
        self.duration = duration
        self.stop_event = stop_event or threading.Event()
        self.clock = clock
        self.refreshes = 0

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    def stop(self) -> None:
        self.stop_event.set()

    def run(self, task: Callable[[], None]) -> None:
        """Run ``task`` once immediately, then on every tick while enabled."""
        task()
        if self.enabled:
            self.repeat(task)

    def repeat(self, task: Callable[[], None]) -> None:
        """Run ``task`` on every tick until the duration elapses or the loop stops."""
        deadline = self.clock() + self.duration
        LOG.info(
            "Background refresh every %gs for %gs", self.interval, self.duration
        )
        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                LOG.info("Background refresh duration elapsed after %d refreshes", self.refreshes)
                return
            if self.stop_event.wait(timeout=min(self.interval, remaining)):
                LOG.info("Background refresh stopped after %d refreshes", self.refreshes)
                return
            if self.clock() >= deadline:
                LOG.info("Background refresh duration elapsed after %d refreshes", self.refreshes)
                return

            try:
                task()
            except CredHelperError as error:
                raise RefreshError(f"failed to refresh credential: {error}") from error
            self.refreshes += 1
            LOG.info("Credential refreshed (%d)", self.refreshes)


@contextmanager
def stop_on_signals(loop: RefreshLoop):
    """Stop ``loop`` on SIGINT/SIGTERM while the block runs."""

    def signal_handler(signum, frame):
        if not loop.stop_event.is_set():
            LOG.info("Received signal %d, stopping background refresh...", signum)
            loop.stop()

    if threading.current_thread() is not threading.main_thread():
        yield loop
        return

    previous = {
        signum: signal.signal(signum, signal_handler)
        for signum in (signal.SIGTERM, signal.SIGINT)
    }
    try:
        yield loop
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
