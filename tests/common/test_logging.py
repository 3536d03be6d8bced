import logging
from watchcast.common.logging import setup_logger, log_execution_time

def test_setup_logger_reenables_disabled_children(caplog):
    child = logging.getLogger("watchcast.tests.child")
    child.disabled = True

    setup_logger("watchcast.tests", logging.INFO)
    with caplog.at_level("WARNING"):
        child.warning("Degraded mode")

    assert not child.disabled
    assert "Degraded mode" in caplog.text

def test_setup_logger_adds_single_handler():
    logger = setup_logger("watchcast.tests.single")
    setup_logger("watchcast.tests.single")
    assert len(logger.handlers) == 1

def test_log_execution_time_passes_result_through():
    logger = logging.getLogger("watchcast.tests.timing")

    @log_execution_time(logger, threshold_ms=0.0)
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
