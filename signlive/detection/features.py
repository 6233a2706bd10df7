"""
Feature extraction from a single hand.

Layout of the 35-value vector:
    [0:10]  distance(tip, wrist), bearing(wrist, tip) for tips 4, 8, 12, 16, 20
    [10:25] bearing between consecutive joints, 3 per finger
    [25:35] pairwise 3D distance between fingertips
"""
from itertools import combinations
from typing import Optional, Sequence

import numpy as np

from signlive.core.config import FINGERTIPS, WRIST
from signlive.core.geometry import Point3D, bearing, distance
from signlive.detection.landmarks import is_valid_hand

FEATURE_SIZE = 35


def joint_chain_start(finger: int) -> int:
    """First landmark of the joint chain used for bend angles of a finger."""
    return finger * 4 + (1 if finger == 0 else 0)


def extract(hand: Sequence[Point3D]) -> Optional[np.ndarray]:
    """
    Convert one hand into its feature vector.

    Args:
        hand: sequence of Point3D (21 expected)

    Returns:
        np.array of shape (35,), or None if the hand has fewer than 21 points
    """
    if not is_valid_hand(hand):
        return None

    wrist = hand[WRIST]
    features = []

    for tip_idx in FINGERTIPS:
        tip = hand[tip_idx]
        features.append(distance(tip, wrist))
        features.append(bearing(wrist, tip))

    for finger in range(5):
        base = joint_chain_start(finger)
        for joint in range(3):
            features.append(bearing(hand[base + joint], hand[base + joint + 1]))

    for i, j in combinations(FINGERTIPS, 2):
        features.append(distance(hand[i], hand[j]))

    return np.array(features, dtype=np.float64)
