"""
API package.
"""
from typing import Optional
from fastapi import FastAPI
from .routes import status, streaming, viewer
from ...application.capture_loop import CaptureLoop
from ...infrastructure.broadcast import FrameBroadcaster
from ....common.config import AppConfig
from ....common.metrics import MetricsCollector


def create_app(
    broadcaster: FrameBroadcaster,
    config: Optional[AppConfig] = None,
    capture_loop: Optional[CaptureLoop] = None,
    metrics_collector: Optional[MetricsCollector] = None
) -> FastAPI:
    """
    Builds the HTTP transport around an existing broadcaster.
    """
    app = FastAPI(title="watchcast", docs_url=None, redoc_url=None)

    app.state.broadcaster = broadcaster
    app.state.config = config or AppConfig()
    app.state.capture_loop = capture_loop
    app.state.metrics_collector = metrics_collector

    app.include_router(viewer.router, tags=["viewer"])
    app.include_router(streaming.router, tags=["streaming"])
    app.include_router(status.router, tags=["status"])
    return app
