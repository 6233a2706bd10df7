"""
Pydantic schemas for API request/response validation.
"""
from typing import List, Optional

from pydantic import BaseModel

from signlive.detection.frame_processor import FrameResult
from signlive.detection.supervisor import DetectorStatus


class LandmarkPoint(BaseModel):
    x: float
    y: float
    z: float = 0.0


class SignConfidence(BaseModel):
    sign: str
    confidence: float


class FrameData(BaseModel):
    """Frame data sent from client."""
    type: str = "frame"
    frame: Optional[str] = None  # Base64 encoded image


class StatusResponse(BaseModel):
    """Coarse detector status for display."""
    type: str = "status"
    phase: str
    state: str
    attempt: int
    message: str = ""
    ready: bool = False

    @classmethod
    def from_status(cls, status: DetectorStatus, ready: bool) -> "StatusResponse":
        return cls(
            phase=status.phase.value,
            state=status.state.value,
            attempt=status.attempt,
            message=status.message,
            ready=ready,
        )


class DetectionResponse(BaseModel):
    """Response sent to client after processing frame."""
    type: str = "result"
    hand_detected: bool
    landmarks: List[List[LandmarkPoint]]
    predictions: List[SignConfidence]
    current_sign: str

    @classmethod
    def from_result(cls, result: FrameResult) -> "DetectionResponse":
        return cls(
            hand_detected=result.hand_detected,
            landmarks=[
                [LandmarkPoint(x=p.x, y=p.y, z=p.z) for p in hand]
                for hand in result.landmarks
            ],
            predictions=[SignConfidence(**item) for item in result.classification.as_list()],
            current_sign=result.current_sign.value,
        )


class HealthResponse(BaseModel):
    status: str
    detector_ready: bool
    phase: str
    backend: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response."""
    type: str = "error"
    error: str
    detail: Optional[str] = None
