import asyncio
import logging
import sys
import time

import cv2

from signlive.core import config
from signlive.detection import DetectorLifecycleManager, FrameProcessor, InitializationSupervisor
from signlive.detection.hand_capture import HAND_CONNECTIONS
from signlive.detection.landmarks import hand_to_array
from signlive.video import VideoCapture

logger = logging.getLogger("signlive")


def draw_hand(frame, hand):
    """Draw one normalized hand on the frame."""
    h, w = frame.shape[:2]
    pixels = hand_to_array(hand)[:, :2] * (w, h)
    points = [(int(x), int(y)) for x, y in pixels]
    for a, b in HAND_CONNECTIONS:
        cv2.line(frame, points[a], points[b], (0, 255, 0), 2)
    for pt in points:
        cv2.circle(frame, pt, 4, (0, 0, 255), -1)


async def run():
    lifecycle = DetectorLifecycleManager()
    supervisor = InitializationSupervisor(lifecycle)
    processor = FrameProcessor(lifecycle, supervisor)
    supervisor.add_listener(lambda status: logger.info(
        "Detector %s (attempt %d) %s", status.phase.value, status.attempt, status.message))

    try:
        cap = VideoCapture(0)
    except ValueError as e:
        logger.error("Could not open webcam: %s", e)
        sys.exit(1)

    interval = 1.0 / config.TARGET_FPS
    last_capture = 0.0

    print("Controls:")
    print("  R: Reset detector")
    print("  Q: Quit")

    async with supervisor:
        try:
            while True:
                now = time.time()
                if now - last_capture < interval:
                    await asyncio.sleep(0.001)
                    continue
                last_capture = now

                frame = cap.read()
                if frame.image is None:
                    logger.error("Could not read frame.")
                    break

                result = await processor.on_frame(frame)
                display = frame.image

                status = supervisor.status
                if result is None:
                    text = f"Detector: {status.phase.value} (attempt {status.attempt})"
                    color = (0, 165, 255)
                else:
                    for hand in result.landmarks:
                        draw_hand(display, hand)
                    sign, conf = result.classification.top
                    text = f"Sign: {result.current_sign.value} | Top: {sign.value} ({conf:.2f})"
                    color = (0, 255, 0) if result.hand_detected else (0, 0, 255)

                cv2.putText(display, text, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2)
                cv2.imshow("Sign Recognition", display)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                elif key == ord('r'):
                    processor.reset()
                    supervisor.restart()
        except KeyboardInterrupt:
            pass
        finally:
            cap.release()
            cv2.destroyAllWindows()
            print("Detector closed.")


def main():
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("Initializing Sign Recognition...")
    asyncio.run(run())


if __name__ == "__main__":
    main()
