"""Shared fixtures for signlive tests."""
import pytest

from helpers import FakeFactory, make_frame, make_hand, ok_probe
from signlive.detection.lifecycle import DetectorLifecycleManager


@pytest.fixture
def iloveyou_hand():
    return make_hand(index=True, pinky=True)


@pytest.fixture
def frame():
    return make_frame()


@pytest.fixture
def factory():
    return FakeFactory()


@pytest.fixture
def lifecycle(factory):
    return DetectorLifecycleManager(factory=factory, backend_probe=ok_probe)
