"""Tests for hand feature extraction."""
import numpy as np
import pytest

from helpers import make_hand
from signlive.core.geometry import bearing, distance
from signlive.detection.features import FEATURE_SIZE, extract, joint_chain_start


@pytest.mark.parametrize("fingers", [
    {},
    {"index": True, "pinky": True},
    {"thumb": True, "index": True, "middle": True, "ring": True, "pinky": True},
])
def test_valid_hand_gives_35_values(fingers):
    features = extract(make_hand(**fingers))
    assert features is not None
    assert features.shape == (FEATURE_SIZE,)
    assert FEATURE_SIZE == 35


def test_deterministic():
    hand = make_hand(index=True, middle=True)
    assert extract(hand).tobytes() == extract(hand).tobytes()


def test_short_hand_returns_none():
    hand = make_hand(index=True)
    assert extract(hand[:20]) is None
    assert extract(()) is None


def test_tip_to_wrist_block():
    hand = make_hand(index=True)
    features = extract(hand)
    assert features[0] == distance(hand[4], hand[0])
    assert features[1] == bearing(hand[0], hand[4])
    assert features[2] == distance(hand[8], hand[0])
    assert features[9] == bearing(hand[0], hand[20])


def test_joint_bend_block():
    hand = make_hand(ring=True)
    features = extract(hand)
    assert [joint_chain_start(f) for f in range(5)] == [1, 4, 8, 12, 16]
    assert features[10] == bearing(hand[1], hand[2])
    assert features[13] == bearing(hand[4], hand[5])
    assert features[24] == bearing(hand[18], hand[19])


def test_fingertip_pair_block():
    hand = make_hand(thumb=True, pinky=True)
    features = extract(hand)
    assert features[25] == distance(hand[4], hand[8])
    assert features[29] == distance(hand[8], hand[12])
    assert features[34] == distance(hand[16], hand[20])
    assert np.all(features[25:] >= 0)
