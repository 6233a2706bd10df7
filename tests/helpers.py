"""Hand builders and fake detectors shared by the test suite."""
import asyncio
import math
import threading

import numpy as np

from signlive.core.geometry import Point3D
from signlive.detection.landmarks import Frame, RawHand

WRIST_POS = (0.5, 0.8)
MCP_DIST = 0.1
EXTENDED_DIST = 0.25
RETRACTED_DIST = 0.12
# thumb, index, middle, ring, pinky
FINGER_ANGLES = (-150.0, -110.0, -90.0, -70.0, -50.0)


def make_hand(thumb=False, index=False, middle=False, ring=False, pinky=False):
    """Build a 21-point hand with the given fingers extended."""
    flags = (thumb, index, middle, ring, pinky)
    points = [None] * 21
    points[0] = Point3D(WRIST_POS[0], WRIST_POS[1], 0.0)

    for finger, (extended, angle) in enumerate(zip(flags, FINGER_ANGLES)):
        dx, dy = math.cos(math.radians(angle)), math.sin(math.radians(angle))
        tip_dist = EXTENDED_DIST if extended else RETRACTED_DIST
        mcp = 1 + finger * 4
        for joint in range(4):
            d = MCP_DIST + (tip_dist - MCP_DIST) * joint / 3
            points[mcp + joint] = Point3D(WRIST_POS[0] + dx * d, WRIST_POS[1] + dy * d, 0.0)
    return tuple(points)


def raw_hand_3d(hand):
    """RawHand that carries an already normalized 3D variant."""
    return RawHand(keypoints=tuple(Point3D(p.x * 640, p.y * 480) for p in hand), keypoints_3d=hand)


def raw_hand_pixels(hand, width, height):
    """RawHand with pixel keypoints only."""
    return RawHand(keypoints=tuple(Point3D(p.x * width, p.y * height) for p in hand))


def make_frame(width=640, height=480):
    return Frame.from_image(np.zeros((height, width, 3), dtype=np.uint8))


class FakeDetector:
    def __init__(self, hands=None, error=None, block=False):
        self.hands = list(hands or [])
        self.error = error
        self.detect_calls = 0
        self.closed = False
        self.started = threading.Event()
        self.release = threading.Event()
        if not block:
            self.release.set()

    def detect(self, image):
        self.detect_calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.hands)

    def close(self):
        self.closed = True


class FakeFactory:
    """Detector factory that fails a given number of times before succeeding."""

    def __init__(self, failures=0, hands=None, fail_backends=(), detector=None):
        self.failures = failures
        self.hands = hands
        self.fail_backends = set(fail_backends)
        self.detector = detector
        self.calls = []
        self.attempts = 0
        self.created = []

    def __call__(self, options):
        self.calls.append(options)
        if options.backend in self.fail_backends:
            raise RuntimeError(f"{options.backend} delegate unavailable")
        self.attempts += 1
        if self.failures < 0 or self.attempts <= self.failures:
            raise RuntimeError("model download failed")
        detector = self.detector or FakeDetector(hands=self.hands)
        self.created.append(detector)
        return detector


def ok_probe(preferred):
    return preferred


def failing_probe(preferred):
    raise AttributeError(preferred.upper())


async def no_sleep(delay):
    return None


async def wait_until(predicate, timeout=5.0):
    """Poll `predicate` until it holds, letting worker threads finish."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)
