"""
Endpoint for the multipart JPEG stream.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from .dependencies import get_broadcaster
from ....domain.entities import EncodedFrame
from ....infrastructure.broadcast import FrameBroadcaster
from .....common.exceptions import BroadcastClosed

logger = logging.getLogger(__name__)

router = APIRouter()

BOUNDARY = "frame"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def format_part(frame: EncodedFrame) -> bytes:
    """
    Format an encoded frame as one multipart body part.
    """
    return (
        b'--' + BOUNDARY.encode() + b'\r\n'
        b'Content-Type: ' + frame.content_type.encode() + b'\r\n'
        b'Content-Length: ' + str(len(frame.data)).encode() + b'\r\n'
        b'\r\n' + frame.data + b'\r\n'
    )


@router.get("/mjpeg")
async def mjpeg_stream(broadcaster: FrameBroadcaster = Depends(get_broadcaster)):
    """
    Never-ending multipart stream of the camera.
    Ends when the client disconnects or the server shuts down.
    """
    try:
        handle = broadcaster.subscribe()
    except BroadcastClosed:
        raise HTTPException(status_code=503, detail="Server is shutting down")

    async def frame_generator():
        try:
            async for frame in handle:
                # Idle ticks publish empty buffers, they are not parts
                if frame.is_empty:
                    continue
                yield format_part(frame)
        finally:
            broadcaster.unsubscribe(handle)

    return StreamingResponse(
        frame_generator(),
        media_type=f"multipart/x-mixed-replace; boundary={BOUNDARY}",
        headers=NO_CACHE_HEADERS,
        # Covers clients that disconnect before the first part is sent
        background=BackgroundTask(broadcaster.unsubscribe, handle)
    )
