"""
Landmark data types and the normalized-hand conversion step.

A Hand is an ordered sequence of 21 Point3D values
(0=wrist, 1-4 thumb, 5-8 index, 9-12 middle, 13-16 ring, 17-20 pinky).
"""
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from signlive.core.config import NUM_LANDMARKS
from signlive.core.geometry import Point3D

logger = logging.getLogger(__name__)

Hand = Tuple[Point3D, ...]
HandSet = List[Hand]


class ReadyState(IntEnum):
    """How far a frame source has progressed towards a decodable image."""
    NOTHING = 0
    METADATA = 1
    DECODABLE = 2


@dataclass(frozen=True)
class Frame:
    """One frame handed to the pipeline by a frame source."""
    image: Optional[np.ndarray]
    width: int
    height: int
    ready_state: ReadyState = ReadyState.DECODABLE

    @classmethod
    def from_image(cls, image: np.ndarray) -> "Frame":
        """Wrap an already decoded BGR image."""
        height, width = image.shape[:2]
        return cls(image=image, width=int(width), height=int(height),
                   ready_state=ReadyState.DECODABLE)

    @property
    def has_dimensions(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class RawHand:
    """
    One hand as reported by the landmark detector.

    keypoints are in pixel space. keypoints_3d is set when the detector
    supplies an already normalized variant (x/y in 0..1 of the frame).
    """
    keypoints: Tuple[Point3D, ...]
    keypoints_3d: Optional[Tuple[Point3D, ...]] = None
    handedness: str = ""
    score: float = 0.0


def is_valid_hand(hand: Optional[Sequence[Point3D]]) -> bool:
    """A hand is usable only with the full 21-point skeleton."""
    return hand is not None and len(hand) >= NUM_LANDMARKS


def normalize_hand(raw: RawHand, width: int, height: int) -> Optional[Hand]:
    """
    Convert a detector hand into normalized coordinates.

    Uses the 3D variant as-is when present (z defaults to 0), otherwise
    divides pixel keypoints by the frame dimensions.

    Returns:
        Hand, or None when the result has fewer than 21 points
    """
    if raw.keypoints_3d:
        hand = tuple(Point3D(float(p.x), float(p.y), float(p.z or 0.0)) for p in raw.keypoints_3d)
    else:
        if width <= 0 or height <= 0:
            return None
        hand = tuple(Point3D(p.x / width, p.y / height, 0.0) for p in raw.keypoints)

    if not is_valid_hand(hand):
        logger.debug("Discarding hand with %d landmarks", len(hand))
        return None
    return hand


def normalize_hands(raw_hands: Sequence[RawHand], width: int, height: int) -> HandSet:
    """Normalize every detected hand, keeping detector order and dropping invalid ones."""
    hands = []
    for raw in raw_hands:
        hand = normalize_hand(raw, width, height)
        if hand is not None:
            hands.append(hand)
    return hands


def hand_to_array(hand: Sequence[Point3D]) -> np.ndarray:
    """(21, 3) array view of a hand, handy for drawing and debugging."""
    return np.array([[p.x, p.y, p.z] for p in hand], dtype=np.float32)
