"""
Shared dependencies for the API routes.
"""
from typing import Optional
from fastapi import HTTPException, Request
from ....application.capture_loop import CaptureLoop
from ....infrastructure.broadcast import FrameBroadcaster
from .....common.config import AppConfig
from .....common.metrics import MetricsCollector

def get_broadcaster(request: Request) -> FrameBroadcaster:
    broadcaster = getattr(request.app.state, "broadcaster", None)
    if broadcaster is None:
        raise HTTPException(status_code=503, detail="Broadcaster not initialized")
    return broadcaster

def get_config(request: Request) -> AppConfig:
    return getattr(request.app.state, "config", None) or AppConfig()

def get_capture_loop(request: Request) -> Optional[CaptureLoop]:
    return getattr(request.app.state, "capture_loop", None)

def get_metrics_collector(request: Request) -> Optional[MetricsCollector]:
    return getattr(request.app.state, "metrics_collector", None)
