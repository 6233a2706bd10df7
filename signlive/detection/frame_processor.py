"""
Per-frame orchestration: detect, normalize, classify, publish.

Only one detection is in flight at a time. A frame that arrives while a
detection is still running is dropped rather than queued.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from signlive.core import config
from signlive.detection.landmarks import Frame, HandSet, ReadyState, normalize_hand, normalize_hands
from signlive.detection.lifecycle import DetectorLifecycleManager
from signlive.detection.sign_classifier import ClassificationResult, SignClass, classify
from signlive.detection.supervisor import InitializationSupervisor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """What the presentation layer receives for one processed frame."""
    landmarks: HandSet
    classification: ClassificationResult
    current_sign: SignClass

    @property
    def hand_detected(self) -> bool:
        return len(self.landmarks) > 0


ResultListener = Callable[[FrameResult], None]


class FrameProcessor:
    """
    Turn frames into FrameResults while the supervisor reports ready.

    Args:
        lifecycle: detector owner used for detection
        supervisor: source of the readiness flag
        width, height: initial dimensions used for pixel normalization
        current_sign_threshold: top confidence needed to change current_sign
    """

    def __init__(
        self,
        lifecycle: DetectorLifecycleManager,
        supervisor: InitializationSupervisor,
        width: int = config.DEFAULT_FRAME_WIDTH,
        height: int = config.DEFAULT_FRAME_HEIGHT,
        current_sign_threshold: float = config.CURRENT_SIGN_THRESHOLD,
    ):
        self.lifecycle = lifecycle
        self.supervisor = supervisor
        self.current_sign_threshold = current_sign_threshold
        self.dimensions: Tuple[int, int] = (width, height)
        self.current_sign = SignClass.NONE
        self.last_result: Optional[FrameResult] = None
        self.processed_frames = 0
        self.dropped_frames = 0
        self._busy = False
        self._listeners: List[ResultListener] = []

    @property
    def is_ready(self) -> bool:
        return self.supervisor.is_ready

    @property
    def busy(self) -> bool:
        return self._busy

    def add_listener(self, listener: ResultListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ResultListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def update_dimensions(self, width: int, height: int) -> None:
        if (width, height) != self.dimensions:
            logger.debug("Frame dimensions changed to %dx%d", width, height)
            self.dimensions = (width, height)

    def reset(self) -> None:
        """Forget per-session presentation state."""
        self.current_sign = SignClass.NONE
        self.last_result = None
        self.dimensions = (config.DEFAULT_FRAME_WIDTH, config.DEFAULT_FRAME_HEIGHT)

    async def on_frame(self, frame: Frame) -> Optional[FrameResult]:
        """
        Process one frame.

        Returns:
            the published FrameResult, or None when the frame was skipped
            (not ready, busy, not decodable, stale or failed)
        """
        if not self.is_ready:
            return None
        if self._busy:
            self.dropped_frames += 1
            return None

        self._busy = True
        try:
            return await self._process(frame)
        except Exception as e:
            logger.debug("Error processing frame: %s", e)
            return None
        finally:
            self._busy = False

    async def _process(self, frame: Frame) -> Optional[FrameResult]:
        if frame.has_dimensions:
            self.update_dimensions(frame.width, frame.height)

        if frame.ready_state < ReadyState.DECODABLE:
            return None

        generation = self.lifecycle.generation
        raw_hands = await self.lifecycle.detect(frame)
        if generation != self.lifecycle.generation or not self.is_ready:
            logger.debug("Detector reset during detection, dropping result")
            return None

        width, height = self.dimensions
        hands = normalize_hands(raw_hands, width, height)
        # an unusable first hand hides any later ones from classification
        usable = bool(hands) and normalize_hand(raw_hands[0], width, height) is not None

        if usable:
            classification = classify(hands)
            sign, confidence = classification.top
            if confidence > self.current_sign_threshold:
                self.current_sign = sign
        else:
            classification = ClassificationResult.no_hand()
            self.current_sign = SignClass.NONE

        result = FrameResult(
            landmarks=hands,
            classification=classification,
            current_sign=self.current_sign,
        )
        self.processed_frames += 1
        self.last_result = result
        self._publish(result)
        return result

    def _publish(self, result: FrameResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception("Result listener failed")
