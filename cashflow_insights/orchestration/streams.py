"""Building blocks for selection-driven fetch pipelines

A pipeline reacts to selection changes on a single asyncio event loop:

- `Debouncer` holds back rapid edits and fires once with the latest value
- `LatestWins` numbers each fetch cycle so that only the newest cycle may
  commit; a result from a superseded cycle is dropped when it resolves
- `StreamOrchestrator` ties both together with neutral-value substitution
  for failed fetches and subscriber notification
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Generic, List, Optional, Set, TypeVar

from cashflow_insights.domain.exceptions import CashflowAPIError
from cashflow_insights.infrastructure.observability.logging import log_cycle_committed
from cashflow_insights.infrastructure.observability.metrics import (
    cycles_committed_counter,
    fetch_failures_counter,
    stale_results_counter,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")


class Debouncer(Generic[T]):
    """
    Delay a callback until pushes stop arriving for `window_seconds`.

    Each push restarts the timer; when it elapses the callback receives only
    the most recent value and intermediate values are discarded.
    """

    def __init__(self, window_seconds: float, callback: Callable[[T], None]):
        self.window_seconds = window_seconds
        self.callback = callback
        self._pending: Optional[T] = None
        self._timer: Optional[asyncio.Task] = None

    @property
    def is_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: T) -> None:
        self._pending = value
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._elapse())

    async def _elapse(self) -> None:
        await asyncio.sleep(self.window_seconds)
        value = self._pending
        self._pending = None
        self.callback(value)

    def cancel(self) -> None:
        if self.is_pending:
            self._timer.cancel()

    async def wait(self) -> None:
        """Wait for the current timer, following restarts, until nothing is pending"""
        while self.is_pending:
            await asyncio.wait({self._timer})


class LatestWins:
    """Generation counter deciding which fetch cycle may commit"""

    def __init__(self, stream: str):
        self.stream = stream
        self.generation = 0

    def begin(self) -> int:
        """Start a new cycle, superseding every earlier one"""
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def commit(self, generation: int) -> bool:
        """True if the cycle may apply its result; counts and logs stale cycles"""
        if self.is_current(generation):
            cycles_committed_counter.labels(stream=self.stream).inc()
            return True

        stale_results_counter.labels(stream=self.stream).inc()
        logger.debug(
            "Discarding stale result",
            extra={"stream": self.stream, "generation": generation, "current": self.generation},
        )
        return False


class StreamOrchestrator(Generic[S]):
    """Base for orchestrators that publish a state snapshot of type S"""

    def __init__(self) -> None:
        self._listeners: List[Callable[[S], None]] = []
        self._tasks: Set[asyncio.Task] = set()
        self._debouncers: List[Debouncer] = []

    @property
    def state(self) -> S:
        raise NotImplementedError

    def subscribe(self, listener: Callable[[S], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it"""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _publish(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            listener(snapshot)

    async def _guarded(self, call: str, fetch: Awaitable[T], neutral: T) -> T:
        """Await a collaborator call, substituting `neutral` when it fails"""
        try:
            return await fetch
        except CashflowAPIError as e:
            fetch_failures_counter.labels(call=call).inc()
            logger.warning(f"Fetch failed, using neutral value: {e}", extra={"call": call})
            return neutral

    def _launch(
        self,
        gate: LatestWins,
        fetch: Callable[[], Awaitable[T]],
        apply: Callable[[T], None],
        neutral: T,
    ) -> int:
        """
        Start a fetch cycle on `gate`.

        `fetch` should already substitute neutral values for collaborator
        failures; any other error also commits `neutral`. When the cycle
        resolves, `apply` runs only if no newer cycle was started on the same
        gate in the meantime; subscribers are then notified.
        """
        generation = gate.begin()
        task = asyncio.get_running_loop().create_task(
            self._run_cycle(gate, generation, fetch, apply, neutral)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return generation

    async def _run_cycle(
        self,
        gate: LatestWins,
        generation: int,
        fetch: Callable[[], Awaitable[T]],
        apply: Callable[[T], None],
        neutral: T,
    ) -> None:
        start_time = time.perf_counter()
        try:
            result = await fetch()
        except Exception:
            fetch_failures_counter.labels(call=gate.stream).inc()
            logger.exception("Fetch cycle failed, using neutral value", extra={"stream": gate.stream})
            result = neutral

        if not gate.commit(generation):
            return

        try:
            apply(result)
        except Exception:
            logger.exception("Applying result failed, using neutral value", extra={"stream": gate.stream})
            apply(neutral)

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_cycle_committed(gate.stream, generation, duration_ms)
        self._publish()

    async def wait_idle(self) -> None:
        """Wait until no debounce timer is pending and no fetch is in flight"""
        while True:
            for debouncer in self._debouncers:
                await debouncer.wait()
            if self._tasks:
                await asyncio.wait(set(self._tasks))
                continue
            if not any(d.is_pending for d in self._debouncers):
                return

    async def close(self) -> None:
        """Cancel pending timers and in-flight fetches"""
        for debouncer in self._debouncers:
            debouncer.cancel()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
