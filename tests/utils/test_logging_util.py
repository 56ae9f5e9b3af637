import logging

from gediwave.utils.logging_util import get_logger


def test_logger_handlers(tmp_path):
	logger = get_logger("gediwave.tests.handlers", log_file=tmp_path / "test.log")
	assert len(logger.handlers) == 2
	assert not logger.propagate


def test_logger_set_up_once(tmp_path):
	first = get_logger("gediwave.tests.once", log_file=tmp_path / "test.log")
	second = get_logger("gediwave.tests.once", log_file=tmp_path / "other.log")
	assert first is second
	assert len(second.handlers) == 2


def test_logger_writes_file(tmp_path):
	log_file = tmp_path / "test.log"
	logger = get_logger("gediwave.tests.file", level=logging.DEBUG, log_file=log_file)
	logger.warning("Shot %s not found", 42)
	for handler in logger.handlers:
		handler.flush()
	assert "Shot 42 not found" in log_file.read_text()
