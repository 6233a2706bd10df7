"""Detection module for sign recognition.

Handles detector lifecycle, landmark normalization, feature extraction and
sign classification. The MediaPipe adapter lives in
signlive.detection.hand_capture and is imported on first use.
"""
from signlive.detection.landmarks import Frame, RawHand, ReadyState, normalize_hand, normalize_hands
from signlive.detection.features import extract, FEATURE_SIZE
from signlive.detection.sign_classifier import SignClass, ClassificationResult, classify
from signlive.detection.lifecycle import DetectorLifecycleManager, DetectorOptions
from signlive.detection.supervisor import InitializationSupervisor, RetryPolicy, DetectorState, DetectorStatus
from signlive.detection.frame_processor import FrameProcessor, FrameResult

__all__ = [
    'Frame',
    'RawHand',
    'ReadyState',
    'normalize_hand',
    'normalize_hands',
    'extract',
    'FEATURE_SIZE',
    'SignClass',
    'ClassificationResult',
    'classify',
    'DetectorLifecycleManager',
    'DetectorOptions',
    'InitializationSupervisor',
    'RetryPolicy',
    'DetectorState',
    'DetectorStatus',
    'FrameProcessor',
    'FrameResult',
]
