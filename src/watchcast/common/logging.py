import logging
import time
from functools import wraps
from typing import Callable

def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Sets up a logger with a standard format.
    """
    logger = logging.getLogger(name)
    # Loggers created at import time may have been disabled by an earlier dictConfig
    for existing in list(logging.root.manager.loggerDict.values()):
        if isinstance(existing, logging.Logger) and (
            existing.name == name or existing.name.startswith(name + ".")
        ):
            existing.disabled = False
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger

def log_execution_time(logger: logging.Logger, threshold_ms: float = 10.0):
    """
    Decorator to measure and log execution time of a function.
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.debug(f"{func.__qualname__} failed: {e}")
                raise
            elapsed_ms = (time.perf_counter() - start) * 1000
            if elapsed_ms > threshold_ms:
                logger.debug(f"{func.__qualname__} executed in {elapsed_ms:.1f}ms")
            return result
        return wrapper
    return decorator
