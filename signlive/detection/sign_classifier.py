"""
Rule-based sign classifier.

A heuristic stand-in for a learned model: each finger is judged extended
or retracted from its tip/MCP distances to the wrist, and an ordered
decision list boosts at most one sign. The first matching rule wins.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Sequence, Tuple

from signlive.core.config import (
    BASELINE_CONFIDENCE,
    EXTENDED_RATIO,
    NONE_FALLBACK_CONFIDENCE,
    NONE_FALLBACK_THRESHOLD,
    TIP_TO_MCP,
    WRIST,
)
from signlive.core.geometry import Point3D, distance
from signlive.detection.features import extract
from signlive.detection.landmarks import is_valid_hand


class SignClass(str, Enum):
    """Closed sign vocabulary. Declaration order breaks confidence ties."""
    HELLO = "hello"
    SORRY = "sorry"
    THANKS = "thanks"
    ILOVEYOU = "iloveyou"
    YES = "yes"
    NO = "no"
    HELP = "help"
    NONE = "none"


class FingerState(NamedTuple):
    """Extended flags for the four non-thumb fingers."""
    index: bool
    middle: bool
    ring: bool
    pinky: bool


Rule = Tuple[Callable[[FingerState], bool], SignClass, float]

RULES: Tuple[Rule, ...] = (
    (lambda f: f.index and f.pinky and not f.middle and not f.ring, SignClass.ILOVEYOU, 0.9),
    (lambda f: not (f.index or f.middle or f.ring or f.pinky), SignClass.YES, 0.85),
    (lambda f: f.index and not f.middle and not f.ring and not f.pinky, SignClass.NO, 0.8),
    (lambda f: f.index and f.middle and f.ring and f.pinky, SignClass.HELLO, 0.85),
    (lambda f: f.index and f.middle and not f.ring and not f.pinky, SignClass.THANKS, 0.75),
    (lambda f: not f.index and f.middle and not f.ring and not f.pinky, SignClass.SORRY, 0.7),
    (lambda f: f.index and not f.middle and f.ring and not f.pinky, SignClass.HELP, 0.8),
)


@dataclass(frozen=True)
class ClassificationResult:
    """Confidence for every sign class plus the descending ranking."""
    confidences: Mapping[SignClass, float]
    ranking: Tuple[Tuple[SignClass, float], ...]

    @classmethod
    def from_confidences(cls, confidences: Dict[SignClass, float]) -> "ClassificationResult":
        order = list(SignClass)
        # sorted() is stable, so ties keep declaration order
        ranking = tuple(sorted(
            ((sign, confidences[sign]) for sign in order),
            key=lambda item: -item[1],
        ))
        return cls(confidences=MappingProxyType(dict(confidences)), ranking=ranking)

    @classmethod
    def no_hand(cls) -> "ClassificationResult":
        """Sentinel result: none at 1.0, every other class at 0.0."""
        confidences = {sign: 0.0 for sign in SignClass}
        confidences[SignClass.NONE] = 1.0
        return cls.from_confidences(confidences)

    @property
    def top(self) -> Tuple[SignClass, float]:
        return self.ranking[0]

    def as_list(self) -> List[Dict]:
        """Ranked list of {"sign", "confidence"} dicts."""
        return [{"sign": sign.value, "confidence": conf} for sign, conf in self.ranking]


def is_finger_extended(hand: Sequence[Point3D], tip_idx: int, ratio: float = EXTENDED_RATIO) -> bool:
    """
    Check if a finger is extended.

    A finger counts as extended when its tip is farther from the wrist
    than `ratio` times the distance of its MCP joint.
    """
    if not is_valid_hand(hand) or tip_idx not in TIP_TO_MCP:
        return False
    wrist = hand[WRIST]
    mcp = hand[TIP_TO_MCP[tip_idx]]
    tip = hand[tip_idx]
    return distance(tip, wrist) > distance(mcp, wrist) * ratio


def finger_state(hand: Sequence[Point3D], ratio: float = EXTENDED_RATIO) -> FingerState:
    return FingerState(
        index=is_finger_extended(hand, 8, ratio),
        middle=is_finger_extended(hand, 12, ratio),
        ring=is_finger_extended(hand, 16, ratio),
        pinky=is_finger_extended(hand, 20, ratio),
    )


def classify_hand(hand: Sequence[Point3D], rules: Sequence[Rule] = RULES) -> ClassificationResult:
    """Classify a single hand. Invalid hands give the no-hand sentinel."""
    if extract(hand) is None:
        return ClassificationResult.no_hand()

    confidences = {sign: BASELINE_CONFIDENCE for sign in SignClass}
    fingers = finger_state(hand)

    for predicate, sign, confidence in rules:
        if predicate(fingers):
            confidences[sign] = confidence
            break

    if all(conf < NONE_FALLBACK_THRESHOLD
           for sign, conf in confidences.items() if sign is not SignClass.NONE):
        confidences[SignClass.NONE] = NONE_FALLBACK_CONFIDENCE

    return ClassificationResult.from_confidences(confidences)


def classify(hands: Sequence[Sequence[Point3D]], rules: Sequence[Rule] = RULES) -> ClassificationResult:
    """
    Classify a hand set by its first hand only.

    An empty set, or a first hand with fewer than 21 points, yields none
    at 1.0. Later hands are never consulted.
    """
    if not hands:
        return ClassificationResult.no_hand()
    return classify_hand(hands[0], rules)
