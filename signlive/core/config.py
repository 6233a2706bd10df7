"""
Core application configuration and constants.
"""
import os
from pathlib import Path

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
MODELS_DIR = PROJECT_ROOT / "models"

# Landmark detector
HAND_MODEL_PATHS = {
    "full": Path(os.getenv("SIGNLIVE_MODEL_PATH", str(MODELS_DIR / "hand_landmarker.task"))),
}
MODEL_QUALITY = "full"
MAX_HANDS = int(os.getenv("SIGNLIVE_MAX_HANDS", "2"))
PREFERRED_BACKEND = os.getenv("SIGNLIVE_BACKEND", "gpu").lower()  # accelerated delegate
DEFAULT_BACKEND = "cpu"
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5
USE_NORMALIZED_LANDMARKS = True  # report hand_landmarks as the normalized 3D variant

# Hand topology
NUM_LANDMARKS = 21
WRIST = 0
FINGERTIPS = (4, 8, 12, 16, 20)
TIP_TO_MCP = {4: 1, 8: 5, 12: 9, 16: 13, 20: 17}

# Classification
EXTENDED_RATIO = 1.5  # tip-to-wrist must exceed this multiple of mcp-to-wrist
BASELINE_CONFIDENCE = 0.05
NONE_FALLBACK_THRESHOLD = 0.7
NONE_FALLBACK_CONFIDENCE = 0.8
CURRENT_SIGN_THRESHOLD = 0.65

# Initialization retry
MAX_INIT_ATTEMPTS = 5
RETRY_BASE_DELAY = 2.0  # seconds
RETRY_MAX_DELAY = 10.0  # seconds

# Frame source defaults
DEFAULT_FRAME_WIDTH = 640
DEFAULT_FRAME_HEIGHT = 480
TARGET_FPS = 15

# Server
HOST = os.getenv("SIGNLIVE_HOST", "0.0.0.0")
PORT = int(os.getenv("SIGNLIVE_PORT", "8000"))
LOG_LEVEL = os.getenv("SIGNLIVE_LOG_LEVEL", "INFO").upper()
