"""
Hand landmark detection using MediaPipe.

Wraps the MediaPipe Tasks HandLandmarker behind the small interface the
lifecycle manager expects: detect(image) -> list of RawHand, close().
"""
import logging
from typing import List

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from signlive.core import config
from signlive.core.geometry import Point3D
from signlive.detection.landmarks import RawHand
from signlive.detection.lifecycle import DetectorOptions

logger = logging.getLogger(__name__)

# Skeleton connections, used by the webcam overlay
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
]


def resolve_delegate(backend: str):
    """Map a backend name onto a MediaPipe delegate."""
    return getattr(python.BaseOptions.Delegate, backend.upper())


def probe_backend(preferred: str = config.PREFERRED_BACKEND) -> str:
    """Return `preferred` if this MediaPipe build has that delegate, raise otherwise."""
    resolve_delegate(preferred)
    return preferred


class HandLandmarkerDetector:
    """MediaPipe HandLandmarker returning RawHand values."""

    def __init__(self, options: DetectorOptions):
        if not options.model_path.exists():
            raise FileNotFoundError(f"Hand landmarker model not found: {options.model_path}")

        base_options = python.BaseOptions(
            model_asset_path=str(options.model_path),
            delegate=resolve_delegate(options.backend),
        )
        landmarker_options = vision.HandLandmarkerOptions(
            base_options=base_options,
            num_hands=options.max_hands,
            min_hand_detection_confidence=options.min_detection_confidence,
            min_tracking_confidence=options.min_tracking_confidence,
        )
        self.options = options
        self.landmarker = vision.HandLandmarker.create_from_options(landmarker_options)
        logger.info("HandLandmarker created (backend=%s, max_hands=%d)",
                    options.backend, options.max_hands)

    def detect(self, image: np.ndarray) -> List[RawHand]:
        """
        Detect hands in a BGR image.

        Returns:
            list of RawHand in the detector's order
        """
        height, width = image.shape[:2]
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        results = self.landmarker.detect(mp_image)

        hands = []
        for i, landmarks in enumerate(results.hand_landmarks or []):
            keypoints = tuple(Point3D(lm.x * width, lm.y * height, 0.0) for lm in landmarks)

            keypoints_3d = None
            if self.options.use_normalized_landmarks:
                # image-space x/y in 0..1, z relative to the wrist
                keypoints_3d = tuple(Point3D(lm.x, lm.y, lm.z or 0.0) for lm in landmarks)

            handedness, score = "", 0.0
            if results.handedness and i < len(results.handedness) and results.handedness[i]:
                category = results.handedness[i][0]
                handedness, score = category.category_name, float(category.score)

            hands.append(RawHand(
                keypoints=keypoints,
                keypoints_3d=keypoints_3d,
                handedness=handedness,
                score=score,
            ))
        return hands

    def close(self):
        self.landmarker.close()


def create_hand_landmarker(options: DetectorOptions) -> HandLandmarkerDetector:
    return HandLandmarkerDetector(options)
