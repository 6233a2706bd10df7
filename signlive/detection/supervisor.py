"""
Initialization supervisor: bounded retry with exponential backoff.

States:
    UNINITIALIZED -> INITIALIZING -> READY
    INITIALIZING -> RETRYING(n) -> INITIALIZING    (transient failure)
    RETRYING(max) -> FAILED                         (budget exhausted)
    any state -> UNINITIALIZED                      (reset)

The retry loop runs as a single asyncio task. reset() cancels it and
bumps an epoch so a late-returning attempt can never change state.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from signlive.core import config
from signlive.core.exceptions import InitializationError
from signlive.detection.lifecycle import DetectorLifecycleManager

logger = logging.getLogger(__name__)

FAILED_MESSAGE = ("Failed to initialize the sign detector. "
                  "Please check your camera permissions and try again.")


class DetectorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RETRYING = "retrying"
    FAILED = "failed"


class Phase(str, Enum):
    """Coarse status shown to the user."""
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = config.MAX_INIT_ATTEMPTS
    base_delay: float = config.RETRY_BASE_DELAY
    max_delay: float = config.RETRY_MAX_DELAY

    def delay(self, attempt: int) -> float:
        """Backoff before re-attempt number `attempt` (1-based): min(2^n, cap) seconds."""
        return min(self.base_delay ** attempt, self.max_delay)

    def schedule(self) -> List[float]:
        return [self.delay(n) for n in range(1, self.max_attempts + 1)]


@dataclass(frozen=True)
class DetectorStatus:
    state: DetectorState
    attempt: int
    message: str = ""

    @property
    def phase(self) -> Phase:
        if self.state is DetectorState.READY:
            return Phase.READY
        if self.state is DetectorState.FAILED:
            return Phase.ERROR
        return Phase.LOADING


StatusListener = Callable[[DetectorStatus], None]


class InitializationSupervisor:
    """
    Drive a DetectorLifecycleManager to READY with bounded retries.

    Args:
        lifecycle: the manager owning the detector
        policy: attempt budget and backoff schedule
        sleep: awaitable used for backoff, replaceable in tests
    """

    def __init__(
        self,
        lifecycle: DetectorLifecycleManager,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.lifecycle = lifecycle
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._state = DetectorState.UNINITIALIZED
        self._attempt = 0
        self._message = ""
        self._epoch = 0
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[StatusListener] = []

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def is_ready(self) -> bool:
        return self._state is DetectorState.READY and self.lifecycle.is_ready

    @property
    def status(self) -> DetectorStatus:
        return DetectorStatus(state=self._state, attempt=self._attempt, message=self._message)

    @property
    def pending(self) -> bool:
        """True while an initialization task is scheduled or running."""
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _transition(self, state: DetectorState, message: str = "") -> None:
        self._state = state
        self._message = message
        status = self.status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Status listener failed")

    # -- control -------------------------------------------------------

    def start(self) -> Optional[asyncio.Task]:
        """
        Begin initialization. Must be called from a running event loop.

        Ignored unless the supervisor is UNINITIALIZED.
        """
        if self._state is not DetectorState.UNINITIALIZED:
            logger.debug("start() ignored in state %s", self._state.value)
            return self._task

        self._epoch += 1
        self._task = asyncio.get_running_loop().create_task(self._run(self._epoch))
        return self._task

    def reset(self) -> None:
        """
        Return to UNINITIALIZED from any state.

        Pending attempts are cancelled and the detector is released before
        the state changes.
        """
        self._epoch += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self.lifecycle.reset()
        self._attempt = 0
        self._transition(DetectorState.UNINITIALIZED)
        logger.info("Detector supervisor reset")

    def restart(self) -> Optional[asyncio.Task]:
        """Reset and immediately start a fresh initialization sequence."""
        logger.info("Reinitializing detector...")
        self.reset()
        return self.start()

    async def shutdown(self) -> None:
        """Cancel pending work, release the detector and wait for the task to finish."""
        task = self._task
        self.reset()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def wait_settled(self) -> DetectorState:
        """Wait for the current sequence to end in READY or FAILED."""
        task = self._task
        if task is not None:
            await asyncio.shield(task)
        return self._state

    async def __aenter__(self) -> "InitializationSupervisor":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    # -- retry loop ----------------------------------------------------

    async def _run(self, epoch: int) -> None:
        while epoch == self._epoch:
            self._transition(DetectorState.INITIALIZING, self._message)
            try:
                await self.lifecycle.acquire()
            except InitializationError as e:
                if epoch != self._epoch:
                    return
                logger.warning("Error initializing detector: %s", e)
                self._attempt += 1

                if self._attempt >= self.policy.max_attempts:
                    logger.error("Detector initialization failed after %d attempts", self._attempt)
                    self._transition(DetectorState.FAILED, FAILED_MESSAGE)
                    return

                delay = self.policy.delay(self._attempt)
                self._transition(
                    DetectorState.RETRYING,
                    f"Initialization attempt {self._attempt} failed. Retrying...",
                )
                logger.info("Auto-retrying initialization in %.0fs (attempt %d)", delay, self._attempt)
                await self._sleep(delay)
                continue

            if epoch != self._epoch:
                return
            self._attempt = 0
            self._transition(DetectorState.READY)
            logger.info("Detector initialized successfully")
            return
