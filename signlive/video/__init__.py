"""Frame sources."""
from signlive.video.capture import VideoCapture

__all__ = ['VideoCapture']
