"""
Session Timer Service.

Owns the three counters a mock interview runs on:

- total_elapsed: seconds since the session was mounted, never reset
- per_question_elapsed: seconds on the current question
- inactivity_countdown: seconds left before the current question is
  auto-skipped, frozen once the candidate interacts

The scheduler only moves on tick(), so tests drive it with a logical
clock. TimerDriver supplies the real one-second tick.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_INACTIVITY_SECONDS = 30


def format_clock(seconds: int) -> str:
    """Format elapsed seconds as zero-padded mm:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class Counter:
    """A named per-second counter that can be started, stopped and reset."""

    def __init__(self, name: str, initial: int = 0, step: int = 1):
        self.name = name
        self.initial = initial
        self.step = step
        self.value = initial
        self.running = False

    def start(self):
        self.running = True

    def stop(self):
        self.running = False

    def reset(self, value: Optional[int] = None):
        self.value = self.initial if value is None else value

    def advance(self):
        if self.running:
            self.value += self.step

    def __repr__(self) -> str:
        state = "running" if self.running else "stopped"
        return f"Counter({self.name}={self.value}, {state})"


class SessionTimers:
    """
    Tick-driven scheduler for the interview clocks.

    tick() returns True on the single tick where the inactivity countdown
    expires without any interaction; the caller performs the auto-skip.
    The countdown then holds at 0 until reset_question().
    """

    def __init__(self, inactivity_seconds: int = DEFAULT_INACTIVITY_SECONDS):
        self.inactivity_seconds = inactivity_seconds
        self.total = Counter("total_elapsed")
        self.question = Counter("per_question_elapsed")
        self.inactivity = Counter("inactivity_countdown", initial=inactivity_seconds, step=-1)
        self.has_interacted = False
        self.auto_skip_fired = False
        self.mounted = False

    @property
    def total_elapsed(self) -> int:
        return self.total.value

    @property
    def per_question_elapsed(self) -> int:
        return self.question.value

    @property
    def inactivity_countdown(self) -> int:
        return self.inactivity.value

    def start(self):
        """Start all clocks (session mounted)."""
        self.mounted = True
        self.total.start()
        self.question.start()
        if not self.has_interacted and not self.auto_skip_fired:
            self.inactivity.start()

    def stop(self):
        """Stop all clocks (session torn down)."""
        self.mounted = False
        self.total.stop()
        self.question.stop()
        self.inactivity.stop()

    def reset_question(self):
        """Restart the per-question clocks for a newly displayed question."""
        self.question.reset()
        self.inactivity.reset(self.inactivity_seconds)
        self.has_interacted = False
        self.auto_skip_fired = False
        if self.mounted:
            self.question.start()
            self.inactivity.start()

    def mark_interaction(self):
        """Freeze the inactivity countdown for the rest of this question."""
        if self.has_interacted:
            return
        self.has_interacted = True
        self.inactivity.stop()
        logger.debug(f"Inactivity countdown frozen at {self.inactivity.value}s")

    def tick(self) -> bool:
        """
        Advance every running clock by one second.

        Returns:
            True when this tick expires the inactivity countdown.
        """
        if not self.mounted:
            return False

        self.total.advance()
        self.question.advance()

        if not self.inactivity.running:
            return False

        if self.inactivity.value <= 1 and not self.has_interacted:
            self.inactivity.value = 0
            self.inactivity.stop()
            self.auto_skip_fired = True
            logger.info("Inactivity countdown expired, auto-skipping question")
            return True

        self.inactivity.advance()
        return False

    @property
    def total_display(self) -> str:
        return format_clock(self.total_elapsed)

    @property
    def question_display(self) -> str:
        return format_clock(self.per_question_elapsed)


class TimerDriver:
    """
    Calls an async tick callback once per interval until stopped.

    The sleep function is injectable so tests can run without waiting.
    """

    def __init__(
        self,
        on_tick: Callable[[], Awaitable[None]],
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._on_tick = on_tick
        self.interval = interval
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self):
        while True:
            await self._sleep(self.interval)
            try:
                await self._on_tick()
            except Exception as e:
                logger.error(f"Timer tick failed: {e}")

    def start(self):
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
