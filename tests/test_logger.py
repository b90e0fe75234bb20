import logging

from rich.logging import RichHandler

from gas_tracker.core.logger import enable_debug, setup_logger


def test_log_file_directory_is_created(tmp_path):
    log_file = tmp_path / "data" / "logs" / "tracker.log"

    logger = setup_logger("gas_tracker.test_dir", level="INFO", log_file=str(log_file))
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert log_file.parent.is_dir()
    assert "hello" in log_file.read_text()


def test_file_gets_debug_while_console_stays_at_level(tmp_path):
    log_file = tmp_path / "tracker.log"

    logger = setup_logger("gas_tracker.test_levels", level="WARNING", log_file=str(log_file))
    logger.debug("detail")
    for handler in logger.handlers:
        handler.flush()

    console_handler = next(h for h in logger.handlers if isinstance(h, RichHandler))
    assert console_handler.level == logging.WARNING
    assert "detail" in log_file.read_text()


def test_enable_debug_lowers_console_level(tmp_path):
    logger = setup_logger(
        "gas_tracker.test_debug", level="INFO", log_file=str(tmp_path / "tracker.log")
    )

    enable_debug(logger)

    console_handler = next(h for h in logger.handlers if isinstance(h, RichHandler))
    assert console_handler.level == logging.DEBUG
