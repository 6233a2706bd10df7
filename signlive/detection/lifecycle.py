"""
Ownership of the single landmark detector instance.

The manager is the only place that constructs, uses or releases the
external detector. Every acquisition and reset bumps a generation counter
so results computed against a released instance can be recognised and
dropped.
"""
import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Optional, Protocol

import numpy as np

from signlive.core import config
from signlive.core.exceptions import InitializationError
from signlive.detection.landmarks import Frame, RawHand, ReadyState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorOptions:
    """Bounded configuration for one detector instance."""
    max_hands: int = config.MAX_HANDS
    model_quality: str = config.MODEL_QUALITY
    backend: str = config.DEFAULT_BACKEND
    min_detection_confidence: float = config.MIN_DETECTION_CONFIDENCE
    min_tracking_confidence: float = config.MIN_TRACKING_CONFIDENCE
    use_normalized_landmarks: bool = config.USE_NORMALIZED_LANDMARKS

    def __post_init__(self):
        if self.max_hands < 1:
            raise ValueError(f"max_hands must be >= 1, got {self.max_hands}")
        if self.model_quality not in config.HAND_MODEL_PATHS:
            raise ValueError(
                f"Unknown model quality '{self.model_quality}', "
                f"expected one of {sorted(config.HAND_MODEL_PATHS)}"
            )

    @property
    def model_path(self) -> Path:
        return config.HAND_MODEL_PATHS[self.model_quality]

    def with_backend(self, backend: str) -> "DetectorOptions":
        return replace(self, backend=backend)


class LandmarkDetector(Protocol):
    def detect(self, image: np.ndarray) -> List[RawHand]: ...

    def close(self) -> None: ...


DetectorFactory = Callable[[DetectorOptions], LandmarkDetector]


def mediapipe_factory(options: DetectorOptions) -> LandmarkDetector:
    from signlive.detection.hand_capture import create_hand_landmarker
    return create_hand_landmarker(options)


def mediapipe_backend_probe(preferred: str) -> str:
    from signlive.detection.hand_capture import probe_backend
    return probe_backend(preferred)


def _close_quietly(detector) -> None:
    try:
        detector.close()
    except Exception as e:
        logger.warning("Error closing detector: %s", e)


class DetectorLifecycleManager:
    """
    Acquire, use and release the landmark detector.

    Args:
        options: detector configuration (backend is chosen at acquire time)
        factory: builds a detector from options, may raise
        backend_probe: returns the accelerated backend name or raises
        preferred_backend: backend tried first
    """

    def __init__(
        self,
        options: Optional[DetectorOptions] = None,
        factory: Optional[DetectorFactory] = None,
        backend_probe: Optional[Callable[[str], str]] = None,
        preferred_backend: str = config.PREFERRED_BACKEND,
    ):
        self.options = options or DetectorOptions()
        self.preferred_backend = preferred_backend
        self.backend: Optional[str] = None
        self._factory = factory or mediapipe_factory
        self._backend_probe = backend_probe or mediapipe_backend_probe
        self._detector: Optional[LandmarkDetector] = None
        self._generation = 0
        self._lock = asyncio.Lock()
        self._active_calls = 0
        self._retired: List[LandmarkDetector] = []

    @property
    def is_ready(self) -> bool:
        return self._detector is not None

    @property
    def generation(self) -> int:
        return self._generation

    def select_backend(self) -> str:
        """Pick the accelerated backend when available, never failing."""
        try:
            return self._backend_probe(self.preferred_backend)
        except Exception as e:
            logger.warning("Backend '%s' unavailable (%s), using '%s'",
                           self.preferred_backend, e, config.DEFAULT_BACKEND)
            return config.DEFAULT_BACKEND

    def _construct(self, backend: str):
        try:
            return self._factory(self.options.with_backend(backend)), backend
        except Exception as e:
            if backend == config.DEFAULT_BACKEND:
                raise
            logger.warning("Detector creation on '%s' failed (%s), falling back to '%s'",
                           backend, e, config.DEFAULT_BACKEND)
        return self._factory(self.options.with_backend(config.DEFAULT_BACKEND)), config.DEFAULT_BACKEND

    async def acquire(self) -> LandmarkDetector:
        """
        Return the held detector, creating it if needed.

        Raises:
            InitializationError: construction failed or a reset raced it
        """
        if self._detector is not None:
            logger.debug("Reusing existing detector instance")
            return self._detector

        async with self._lock:
            if self._detector is not None:
                return self._detector

            generation = self._generation
            backend = self.select_backend()
            logger.info("Starting hand detector initialization (backend=%s)", backend)

            task = asyncio.ensure_future(asyncio.to_thread(self._construct, backend))
            try:
                detector, backend = await asyncio.shield(task)
            except asyncio.CancelledError:
                task.add_done_callback(self._close_orphan)
                raise
            except Exception as e:
                raise InitializationError(f"Failed to create hand detector: {e}") from e

            if detector is None:
                raise InitializationError("Detector factory returned None")
            if generation != self._generation:
                _close_quietly(detector)
                raise InitializationError("Detector was reset during initialization")

            self._detector = detector
            self.backend = backend
            logger.info("Hand detector initialized (backend=%s)", backend)
            return detector

    @staticmethod
    def _close_orphan(task: "asyncio.Future") -> None:
        if task.cancelled() or task.exception() is not None:
            return
        detector, _ = task.result()
        if detector is not None:
            _close_quietly(detector)

    async def detect(self, frame: Optional[Frame]) -> List[RawHand]:
        """
        Run detection on one frame.

        Never raises: an unavailable detector, an unready frame or a
        detector error all give an empty list.
        """
        if self._detector is None:
            try:
                await self.acquire()
            except InitializationError as e:
                logger.debug("Error re-initializing detector during detection: %s", e)
                return []

        if frame is None or frame.image is None:
            return []
        if frame.ready_state < ReadyState.METADATA or not frame.has_dimensions:
            logger.debug("Frame not ready yet, skipping detection")
            return []

        detector = self._detector
        generation = self._generation
        if detector is None:
            return []

        self._active_calls += 1
        try:
            hands = await asyncio.to_thread(detector.detect, frame.image)
        except Exception as e:
            logger.debug("Error detecting hands: %s", e)
            return []
        finally:
            self._active_calls -= 1
            if self._active_calls == 0:
                self._close_retired()

        if generation != self._generation or detector is not self._detector:
            logger.debug("Discarding detection from a released detector")
            return []
        return list(hands or [])

    def _close_retired(self) -> None:
        retired, self._retired = self._retired, []
        for detector in retired:
            _close_quietly(detector)

    def reset(self) -> None:
        """Release the held detector unconditionally."""
        self._generation += 1
        detector, self._detector = self._detector, None
        self.backend = None
        if detector is not None:
            if self._active_calls:
                # closed once the in-flight detection returns
                self._retired.append(detector)
            else:
                _close_quietly(detector)
        logger.info("Detector cleaned up and reset")

    async def __aenter__(self) -> "DetectorLifecycleManager":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.reset()
