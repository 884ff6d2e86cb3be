"""Poll timing: runs while MQTT is connected, backs off on failures."""
import logging
import threading
from typing import Callable, Optional

_LOGGER = logging.getLogger(__name__)


class PollScheduler:
    """Stopped/Running state machine driving one poll at a time.

    `poll` returns True on success. Success resets the delay to `base_interval`;
    failure doubles it up to `max_interval`. Timers are one-shot and re-armed
    only after the poll they fired has finished, so polls never overlap.
    """

    def __init__(self, poll: Callable[[], bool], *, base_interval: float, max_interval: float,
                 timer_factory: Callable = threading.Timer) -> None:
        self.poll = poll
        self.base_interval = float(base_interval)
        self.max_interval = max(float(max_interval), self.base_interval)
        self.timer_factory = timer_factory
        self.delay = self.base_interval
        self._running = False
        self._in_flight = False
        self._generation = 0
        self._timer = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._generation += 1
            self.delay = self.base_interval
            _LOGGER.info("Polling started (every %ss)", int(self.base_interval))
            if self._in_flight:
                # the finishing poll re-arms for this generation
                return
            self._arm(0)

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            _LOGGER.info("Polling stopped")

    def _arm(self, delay: float) -> None:
        generation = self._generation
        timer = self.timer_factory(delay, lambda: self._fire(generation))
        timer.daemon = True
        self._timer = timer
        timer.start()
        _LOGGER.debug("Next poll in %ss", delay)

    def _fire(self, generation: int) -> None:
        with self._lock:
            # timer may fire just after stop(); cancel() does not stop a callback already running
            if not self._running or generation != self._generation:
                return
            self._timer = None
            self._in_flight = True

        ok = False
        try:
            ok = bool(self.poll())
        except Exception:
            _LOGGER.exception("Poll raised")
        finally:
            with self._lock:
                self._in_flight = False
                if generation != self._generation:
                    # stopped (and maybe restarted) meanwhile: result does not count
                    if self._running and self._timer is None:
                        self._arm(0)
                else:
                    self._after_poll(ok)

    def _after_poll(self, ok: bool) -> None:
        if ok:
            self.delay = self.base_interval
        else:
            self.delay = min(self.delay * 2, self.max_interval)
            _LOGGER.warning("Poll failed, retrying in %ss", int(self.delay))
        self._arm(self.delay)
