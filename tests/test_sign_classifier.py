"""Tests for the rule-based sign classifier."""
import pytest

from helpers import make_hand
from signlive.detection.sign_classifier import (
    ClassificationResult,
    SignClass,
    classify,
    finger_state,
    is_finger_extended,
)

NON_NONE = [sign for sign in SignClass if sign is not SignClass.NONE]


class TestNoHand:
    def test_empty_set(self):
        result = classify([])
        assert result.confidences[SignClass.NONE] == 1.0
        assert all(result.confidences[sign] == 0.0 for sign in NON_NONE)
        assert result.top == (SignClass.NONE, 1.0)

    def test_short_hand_treated_as_absent(self):
        result = classify([make_hand(index=True)[:15]])
        assert result == ClassificationResult.no_hand()

    def test_every_class_present(self):
        assert set(classify([]).confidences) == set(SignClass)
        assert len(classify([]).ranking) == 8


@pytest.mark.parametrize("fingers,expected,confidence", [
    ({"index": True, "pinky": True}, SignClass.ILOVEYOU, 0.9),
    ({}, SignClass.YES, 0.85),
    ({"index": True}, SignClass.NO, 0.8),
    ({"index": True, "middle": True, "ring": True, "pinky": True}, SignClass.HELLO, 0.85),
    ({"index": True, "middle": True}, SignClass.THANKS, 0.75),
    ({"middle": True}, SignClass.SORRY, 0.7),
    ({"index": True, "ring": True}, SignClass.HELP, 0.8),
])
def test_each_rule_boosts_one_class(fingers, expected, confidence):
    result = classify([make_hand(**fingers)])

    assert result.confidences[expected] == confidence
    assert result.top == (expected, confidence)
    for sign in SignClass:
        if sign is not expected:
            assert result.confidences[sign] == 0.05


@pytest.mark.parametrize("fingers", [
    {"middle": True, "ring": True},
    {"index": True, "middle": True, "ring": True},
    {"pinky": True},
])
def test_no_rule_falls_back_to_none(fingers):
    result = classify([make_hand(**fingers)])

    assert result.top == (SignClass.NONE, 0.8)
    assert all(result.confidences[sign] == 0.05 for sign in NON_NONE)
    # ties keep declaration order
    assert [sign for sign, _ in result.ranking[1:]] == NON_NONE


def test_thumb_is_ignored():
    with_thumb = classify([make_hand(thumb=True, index=True, pinky=True)])
    without = classify([make_hand(index=True, pinky=True)])
    assert with_thumb == without


def test_first_match_wins():
    rules = (
        (lambda f: f.index, SignClass.NO, 0.8),
        (lambda f: f.index, SignClass.HELP, 0.8),
    )
    result = classify([make_hand(index=True)], rules=rules)
    assert result.confidences[SignClass.NO] == 0.8
    assert result.confidences[SignClass.HELP] == 0.05


def test_uses_first_hand_only():
    hello = make_hand(index=True, middle=True, ring=True, pinky=True)
    fist = make_hand()

    assert classify([hello, fist]).top[0] is SignClass.HELLO
    assert classify([fist, hello]).top[0] is SignClass.YES


def test_invalid_first_hand_hides_later_hands():
    hello = make_hand(index=True, middle=True, ring=True, pinky=True)
    result = classify([hello[:10], hello])
    assert result.top == (SignClass.NONE, 1.0)
    assert result.confidences[SignClass.HELLO] == 0.0


def test_extended_predicate():
    hand = make_hand(index=True)
    assert is_finger_extended(hand, 8)
    assert not is_finger_extended(hand, 12)
    assert not is_finger_extended(hand, 7)
    assert not is_finger_extended(hand[:20], 8)
    assert finger_state(hand) == (True, False, False, False)


def test_result_is_immutable():
    result = classify([make_hand()])
    with pytest.raises(TypeError):
        result.confidences[SignClass.YES] = 1.0


def test_as_list_is_ranked():
    ranked = classify([make_hand(index=True, pinky=True)]).as_list()
    assert ranked[0] == {"sign": "iloveyou", "confidence": 0.9}
    assert [item["confidence"] for item in ranked] == sorted(
        (item["confidence"] for item in ranked), reverse=True)
