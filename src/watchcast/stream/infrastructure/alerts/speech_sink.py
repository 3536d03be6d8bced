"""
Alert sinks: speak the message through an external command, or just log it.
"""
import logging
import subprocess
from typing import Sequence
from ...domain.protocols import AlertSink
from ....common.exceptions import AlertError

logger = logging.getLogger(__name__)


class SpeechAlertSink(AlertSink):
    """
    Runs `command + [text]`, by default `spd-say -r -30 <text>`.
    """
    def __init__(self, command: Sequence[str] = ("spd-say", "-r", "-30"), timeout: float = 30.0):
        if not command:
            raise ValueError("Alert command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    def notify(self, text: str) -> None:
        logger.info(f"Alert: {text}")
        try:
            subprocess.run(
                [*self.command, text],
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise AlertError(f"Alert command not found: {self.command[0]}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise AlertError(f"Alert command exited with {e.returncode}: {stderr}") from e
        except subprocess.TimeoutExpired as e:
            raise AlertError(f"Alert command timed out after {self.timeout}s") from e


class LogAlertSink(AlertSink):
    """Logs the alert and does nothing else."""

    def notify(self, text: str) -> None:
        logger.warning(f"Alert: {text}")
