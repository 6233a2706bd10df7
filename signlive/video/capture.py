"""
Frame source over an OpenCV capture device.
"""
import logging

import cv2

from signlive.core import config
from signlive.detection.landmarks import Frame, ReadyState

logger = logging.getLogger(__name__)


class VideoCapture:
    def __init__(self, source=0, width=config.DEFAULT_FRAME_WIDTH, height=config.DEFAULT_FRAME_HEIGHT):
        self.source = source
        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            raise ValueError("Unable to open a camera")
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info("Camera %s opened at %dx%d", source, self.width, self.height)

    def read(self, mirror=True) -> Frame:
        """
        Grab the next frame.

        A failed read yields a frame with no image instead of raising, so the
        pipeline treats it as not yet decodable.
        """
        flag, image = self.cap.read()
        if not flag or image is None:
            return Frame(image=None, width=self.width, height=self.height,
                         ready_state=ReadyState.METADATA)
        if mirror:
            image = cv2.flip(image, 1)
        return Frame.from_image(image)

    def release(self):
        if hasattr(self, 'cap') and self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __del__(self):
        self.release()
