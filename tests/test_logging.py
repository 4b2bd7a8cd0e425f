import json

from timecard.logging import configure_logging, get_logger


def test_json_lines_by_default(capsys):
    configure_logging("INFO")

    get_logger("timecard.tests").info("timecards_loaded", days=2)

    record = json.loads(capsys.readouterr().err.strip())
    assert record["event"] == "timecards_loaded"
    assert record["days"] == 2
    assert record["level"] == "info"
    assert "timestamp" in record


def test_console_format_when_json_is_off(capsys):
    configure_logging("INFO", json=False)

    get_logger("timecard.tests").info("export_written", record_count=5)

    line = capsys.readouterr().err.strip()
    assert "export_written" in line
    assert "record_count=5" in line
    assert not line.startswith("{")


def test_level_filters_lower_records(capsys):
    configure_logging("warning")

    logger = get_logger("timecard.tests")
    logger.info("submission_accepted")
    logger.warning("submission_in_flight")

    err = capsys.readouterr().err
    assert "submission_accepted" not in err
    assert "submission_in_flight" in err
