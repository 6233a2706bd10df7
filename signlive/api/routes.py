"""
FastAPI routes for the sign recognition API.
"""
import base64
import binascii
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

import cv2
import numpy as np
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from signlive.api.schemas import (
    DetectionResponse,
    ErrorResponse,
    FrameData,
    HealthResponse,
    StatusResponse,
)
from signlive.detection.frame_processor import FrameProcessor
from signlive.detection.landmarks import Frame
from signlive.detection.lifecycle import DetectorFactory, DetectorLifecycleManager, DetectorOptions
from signlive.detection.supervisor import InitializationSupervisor, RetryPolicy

logger = logging.getLogger(__name__)


class SignRecognitionService:
    """Lifecycle manager, supervisor and frame processor wired together."""

    def __init__(
        self,
        options: Optional[DetectorOptions] = None,
        detector_factory: Optional[DetectorFactory] = None,
        backend_probe: Optional[Callable[[str], str]] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.lifecycle = DetectorLifecycleManager(
            options=options,
            factory=detector_factory,
            backend_probe=backend_probe,
        )
        supervisor_kwargs = {"policy": policy}
        if sleep is not None:
            supervisor_kwargs["sleep"] = sleep
        self.supervisor = InitializationSupervisor(self.lifecycle, **supervisor_kwargs)
        self.processor = FrameProcessor(self.lifecycle, self.supervisor)

    def status(self) -> StatusResponse:
        return StatusResponse.from_status(self.supervisor.status, self.supervisor.is_ready)

    def restart(self) -> StatusResponse:
        self.processor.reset()
        self.supervisor.restart()
        return self.status()


def decode_frame(frame_base64: str) -> np.ndarray:
    """Decode base64 frame to numpy array."""
    # Remove data URL prefix if present
    if "," in frame_base64:
        frame_base64 = frame_base64.split(",", 1)[1]

    img_bytes = base64.b64decode(frame_base64)
    if not img_bytes:
        raise ValueError("Empty frame payload")

    nparr = np.frombuffer(img_bytes, np.uint8)
    try:
        frame = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ValueError(f"Frame could not be decoded: {e}") from e
    if frame is None:
        raise ValueError("Frame could not be decoded as an image")
    return frame


def create_app(service: Optional[SignRecognitionService] = None) -> FastAPI:
    """Build the FastAPI app around a recognition service."""
    service = service or SignRecognitionService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting detector initialization")
        service.supervisor.start()
        try:
            yield
        finally:
            await service.supervisor.shutdown()
            logger.info("Detector shut down")

    app = FastAPI(title="Sign Recognition API", lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        svc = request.app.state.service
        return HealthResponse(
            status="healthy",
            detector_ready=svc.supervisor.is_ready,
            phase=svc.supervisor.status.phase.value,
            backend=svc.lifecycle.backend,
        )

    @app.get("/api/status", response_model=StatusResponse)
    async def get_status(request: Request):
        return request.app.state.service.status()

    @app.post("/api/reset", response_model=StatusResponse)
    async def reset_detector(request: Request):
        """Tear down the detector and start initialization again."""
        return request.app.state.service.restart()

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket endpoint for real-time sign recognition.

        Messages:
        - Client -> Server: {"type": "frame", "frame": "base64..."}
        - Client -> Server: {"type": "reset"}
        - Server -> Client: DetectionResponse, StatusResponse or ErrorResponse
        """
        svc = websocket.app.state.service
        await websocket.accept()
        logger.info("WebSocket connected")

        try:
            while True:
                try:
                    data = FrameData.model_validate(await websocket.receive_json())
                except (ValueError, ValidationError) as e:
                    await websocket.send_json(ErrorResponse(
                        error="bad_request", detail=str(e),
                    ).model_dump())
                    continue

                if data.type == "reset":
                    await websocket.send_json(svc.restart().model_dump())
                    continue

                if data.type != "frame" or not data.frame:
                    await websocket.send_json(ErrorResponse(
                        error="bad_request",
                        detail=f"Unsupported message type '{data.type}'",
                    ).model_dump())
                    continue

                try:
                    image = decode_frame(data.frame)
                except (ValueError, binascii.Error) as e:
                    logger.debug("Frame decode error: %s", e)
                    await websocket.send_json(ErrorResponse(
                        error="decode_failed", detail=str(e),
                    ).model_dump())
                    continue

                result = await svc.processor.on_frame(Frame.from_image(image))
                if result is None:
                    await websocket.send_json(svc.status().model_dump())
                else:
                    await websocket.send_json(DetectionResponse.from_result(result).model_dump())

        except WebSocketDisconnect:
            logger.info("WebSocket disconnected")

    return app


app = create_app()
