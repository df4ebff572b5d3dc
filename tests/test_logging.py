"""Tests for structured logging configuration."""

import json
import logging

from glucos.logging_config import (
    JsonFormatter,
    StructuredLogger,
    TextFormatter,
    correlation_id_ctx,
    get_logger,
    redact_fields,
    setup_logging,
)


def make_record(level: int = logging.INFO, msg: str = "Test", **extra_fields):
    record = logging.LogRecord(
        name="glucos.test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestJsonFormatter:
    """Tests for JSON log formatting."""

    def test_json_format_basic(self):
        formatter = JsonFormatter(service_name="test-service")

        parsed = json.loads(formatter.format(make_record(msg="Reading generated")))

        assert parsed["level"] == "INFO"
        assert parsed["service"] == "test-service"
        assert parsed["message"] == "Reading generated"
        assert parsed["logger"] == "glucos.test"
        assert "timestamp" in parsed
        assert "correlation_id" not in parsed

    def test_json_format_with_correlation_id(self):
        token = correlation_id_ctx.set("corr-123")
        try:
            parsed = json.loads(JsonFormatter().format(make_record()))
        finally:
            correlation_id_ctx.reset(token)

        assert parsed["correlation_id"] == "corr-123"

    def test_json_format_includes_extra_fields(self):
        record = make_record(value=65, trend="down")

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["value"] == 65
        assert parsed["trend"] == "down"

    def test_json_format_error_includes_location(self):
        parsed = json.loads(JsonFormatter().format(make_record(level=logging.ERROR)))

        assert parsed["location"]["file"] == "test.py"
        assert parsed["location"]["line"] == 10


    def test_json_format_redacts_free_text(self):
        record = make_record(msg="Meal logged", description="Pizza at Joe's", carbs=80)

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["description"] == "<redacted 14 chars>"
        assert parsed["carbs"] == 80

    def test_json_timestamp_from_record(self):
        record = make_record()
        record.created = 0.0

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["timestamp"] == "1970-01-01T00:00:00+00:00"


class TestTextFormatter:
    """Tests for human-readable formatting."""

    def test_text_format_basic(self):
        output = TextFormatter(service_name="svc").format(make_record(msg="Hello"))

        assert "svc" in output
        assert "INFO" in output
        assert "[-]" in output
        assert output.endswith("Hello")

    def test_text_format_appends_extra_fields(self):
        output = TextFormatter().format(make_record(msg="Alert", severity="critical"))
        assert output.endswith("Alert severity=critical")


class TestStructuredLogger:
    """Tests for the structured logger wrapper."""

    def test_get_logger(self):
        assert isinstance(get_logger("glucos.x"), StructuredLogger)

    def test_logger_with_extra_fields(self, caplog):
        logger = get_logger("glucos.test.extra")

        with caplog.at_level(logging.INFO):
            logger.info("Meal logged", carbs=45)

        record = caplog.records[-1]
        assert record.getMessage() == "Meal logged"
        assert record.extra_fields == {"carbs": 45}

    def test_logger_without_extra_fields(self, caplog):
        logger = get_logger("glucos.test.plain")

        with caplog.at_level(logging.WARNING):
            logger.warning("Plain warning")

        assert not hasattr(caplog.records[-1], "extra_fields")


class TestSetupLogging:
    """Tests for root logger setup."""

    def teardown_method(self):
        setup_logging(log_format="json", log_level="INFO")

    def test_setup_json_logging(self):
        setup_logging(log_format="json", log_level="DEBUG", service_name="svc")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.handlers[0].formatter.service_name == "svc"

    def test_setup_text_logging(self):
        setup_logging(log_format="text")
        assert isinstance(logging.getLogger().handlers[0].formatter, TextFormatter)

    def test_third_party_loggers_quieted(self):
        setup_logging()
        assert logging.getLogger("apscheduler").level == logging.WARNING


class TestRedaction:
    """Tests for free-text redaction."""

    def test_only_free_text_fields_redacted(self):
        fields = redact_fields({"note": "felt shaky", "value": 65, "note_count": 2})
        assert fields == {
            "note": "<redacted 10 chars>",
            "value": 65,
            "note_count": 2,
        }

    def test_missing_note_left_alone(self):
        assert redact_fields({"note": None}) == {"note": None}


class TestBind:
    """Tests for bound logger fields."""

    def test_bound_fields_attached(self, caplog):
        logger = get_logger("glucos.test.bound").bind(sink="LogNotificationSink")

        with caplog.at_level(logging.INFO):
            logger.info("Alert notification delivered", bgl=65)

        assert caplog.records[-1].extra_fields == {
            "sink": "LogNotificationSink",
            "bgl": 65,
        }

    def test_call_fields_override_bound(self, caplog):
        logger = get_logger("glucos.test.override").bind(source="generator")

        with caplog.at_level(logging.INFO):
            logger.info("Reading", source="manual")

        assert caplog.records[-1].extra_fields == {"source": "manual"}

    def test_bind_does_not_change_parent(self, caplog):
        parent = get_logger("glucos.test.parent")
        parent.bind(sink="x")

        with caplog.at_level(logging.INFO):
            parent.info("Plain")

        assert not hasattr(caplog.records[-1], "extra_fields")

    def test_location_points_at_caller(self, caplog):
        logger = get_logger("glucos.test.location")

        with caplog.at_level(logging.ERROR):
            logger.error("Failure")

        assert caplog.records[-1].funcName == "test_location_points_at_caller"
