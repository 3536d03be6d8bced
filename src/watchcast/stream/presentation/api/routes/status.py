"""
Endpoints for health and pipeline metrics.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from .dependencies import get_broadcaster, get_capture_loop, get_config, get_metrics_collector
from ....application.capture_loop import CaptureLoop
from ....infrastructure.broadcast import FrameBroadcaster
from .....common.config import AppConfig
from .....common.metrics import MetricsCollector

router = APIRouter()

@router.get("/status")
async def get_status(
    broadcaster: FrameBroadcaster = Depends(get_broadcaster),
    capture_loop: Optional[CaptureLoop] = Depends(get_capture_loop),
    config: AppConfig = Depends(get_config)
):
    return {
        "status": "closed" if broadcaster.closed else "running",
        "state": capture_loop.state.value if capture_loop else None,
        "viewers": broadcaster.demand_count(),
        "detection_enabled": bool(capture_loop and capture_loop.detection_enabled),
        "alerts_enabled": bool(capture_loop and capture_loop.alerts is not None),
        "source": config.source.id,
    }

@router.get("/metrics")
async def get_metrics(metrics_collector: Optional[MetricsCollector] = Depends(get_metrics_collector)):
    if metrics_collector is None:
        raise HTTPException(status_code=503, detail="Metrics not available")
    return metrics_collector.get_metrics().to_dict()
