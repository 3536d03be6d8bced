"""
Landing page embedding the stream, optionally behind HTTP Basic auth.
"""
import secrets
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from .dependencies import get_config
from .....common.config import AppConfig

router = APIRouter()

security = HTTPBasic(auto_error=False)

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>watchcast</title></head>
<body style="margin: 0; background: #000;">
<img src="/mjpeg" style="height: 100%;"/>
</body>
</html>
"""


def require_viewer_auth(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    config: AppConfig = Depends(get_config)
):
    """No-op unless a credential is configured."""
    expected = config.server.basic_auth()
    if expected is None:
        return

    if credentials is not None:
        user_ok = secrets.compare_digest(
            credentials.username.encode("utf-8"), expected[0].encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            credentials.password.encode("utf-8"), expected[1].encode("utf-8")
        )
        if user_ok and password_ok:
            return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Basic"},
    )


@router.get("/", response_class=HTMLResponse, dependencies=[Depends(require_viewer_auth)])
async def index():
    return INDEX_HTML
