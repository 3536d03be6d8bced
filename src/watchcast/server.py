"""
Process entry point: wires the capture loop, the broadcaster and the HTTP
server, and coordinates shutdown.

Usage:
    watchcast source.id=0 server.port=8080
    watchcast source.id=video.mp4 detection.show_detections=true alert.message="Hello"
"""
import logging
import sys
from typing import Callable, Optional

import hydra
import uvicorn
from omegaconf import DictConfig

from .common.config import AppConfig, to_app_config
from .common.exceptions import ConfigurationError, SourceError
from .common.logging import setup_logger
from .stream.application.builder import StreamApplicationBuilder
from .stream.presentation.api import create_app

logger = logging.getLogger(__name__)


class StreamServer(uvicorn.Server):
    """
    uvicorn server that closes the broadcaster as soon as shutdown begins.
    Viewer streams never finish on their own, so closing the broadcaster
    is what lets open connections drain within the grace period.
    """

    def __init__(self, config: uvicorn.Config, on_shutdown: Callable[[], None]):
        super().__init__(config)
        self._on_shutdown = on_shutdown

    async def shutdown(self, sockets=None):
        logger.info("Shutting down, closing viewer streams...")
        self._on_shutdown()
        await super().shutdown(sockets=sockets)


def run(config: AppConfig) -> int:
    """
    Runs the server until interrupted. Returns the process exit code.
    """
    setup_logger("watchcast", getattr(logging, config.log_level))

    builder = StreamApplicationBuilder(config)
    try:
        builder.build_source()
    except (SourceError, ValueError) as e:
        logger.error(f"Unable to open capture source: {e}")
        return 1

    capture_loop = (
        builder
        .build_annotator()
        .build_alerts()
        .build_encoder()
        .build_broadcaster()
        .build_capture_loop()
    )
    broadcaster = builder.broadcaster

    app = create_app(
        broadcaster,
        config=config,
        capture_loop=capture_loop,
        metrics_collector=builder.metrics_collector
    )
    server_cfg = config.server
    server = StreamServer(
        uvicorn.Config(
            app,
            host=server_cfg.host,
            port=server_cfg.port,
            timeout_graceful_shutdown=server_cfg.shutdown_grace_period,
            log_config=None,
        ),
        on_shutdown=broadcaster.close
    )

    capture_loop.start()
    logger.info(f"Serving the camera stream at: http://{server_cfg.host}:{server_cfg.port}")
    exit_code = 0
    try:
        server.run()
    except SystemExit as e:
        # uvicorn exits when it cannot bind the port
        exit_code = e.code if isinstance(e.code, int) else 1
    except KeyboardInterrupt:
        # uvicorn re-raises the captured SIGINT once shutdown has completed
        logger.info("Interrupted, shutdown complete")
    finally:
        broadcaster.close()
        if not capture_loop.stop(timeout=max(server_cfg.shutdown_grace_period, 1.0)):
            exit_code = exit_code or 1

    if exit_code == 0 and not server.started:
        logger.error(f"Could not start server on port {server_cfg.port}")
        exit_code = 1
    return exit_code


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> Optional[int]:
    try:
        config = to_app_config(cfg)
    except ConfigurationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(2)

    exit_code = run(config)
    if exit_code:
        sys.exit(exit_code)
    return None


if __name__ == "__main__":
    main()
