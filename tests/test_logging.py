import io
import logging

import orjson

from cyclestreets.bikedata import setup_logging


def test_json_records_with_extra_fields():
    stream = io.StringIO()
    package_logger = setup_logging("DEBUG", stream=stream)
    try:
        logging.getLogger("cyclestreets.bikedata._controller").info(
            "Refresh #%d", 3, extra={"bbox": "0,0,1,1"}
        )
    finally:
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
        package_logger.setLevel(logging.NOTSET)

    record = orjson.loads(stream.getvalue().splitlines()[-1])
    assert record["message"] == "Refresh #3"
    assert record["level"] == "INFO"
    assert record["logger"] == "cyclestreets.bikedata._controller"
    assert record["bbox"] == "0,0,1,1"


def test_setup_replaces_handler():
    first = setup_logging("INFO", stream=io.StringIO())
    second = setup_logging("WARNING", stream=io.StringIO())
    try:
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.WARNING
    finally:
        for handler in second.handlers[:]:
            second.removeHandler(handler)
        second.setLevel(logging.NOTSET)
