"""Tests for the built-in RepairLogger sinks."""

from __future__ import annotations

import io
import json
import logging

from rich.console import Console

from mend.models.config import RepairConfig
from mend.protocols import RepairLogger
from mend.repair import attempt_repair
from mend.sinks import (
    CompositeRepairLogger,
    ConsoleRepairLogger,
    JsonLinesRepairLogger,
    NullRepairLogger,
    StdlibRepairLogger,
)
from tests.conftest import BrokenLogger, RecordingLogger, ScriptedCaller

ALICE_FIXED = '{"name": "Alice", "age": 30}'


def _run(schema, sink, *outputs, config=None):
    return attempt_repair(
        schema, '{"name": "Alice"}', config or RepairConfig(max_attempts=2),
        ScriptedCaller(*outputs), sink,
    )


def test_builtin_sinks_conform_to_protocol():
    for sink in (
        NullRepairLogger(),
        StdlibRepairLogger(),
        ConsoleRepairLogger(Console(file=io.StringIO())),
        JsonLinesRepairLogger(io.StringIO()),
        CompositeRepairLogger([]),
    ):
        assert isinstance(sink, RepairLogger)


class TestStdlibRepairLogger:
    def test_success_logged_at_info(self, person_schema, caplog):
        with caplog.at_level(logging.INFO, logger="mend.repair.session"):
            _run(person_schema, StdlibRepairLogger(), ALICE_FIXED)

        messages = [r.getMessage() for r in caplog.records if r.name == "mend.repair.session"]
        assert messages[0].startswith("Repair attempt 1")
        assert "succeeded: repaired=True, attempts=1" in messages[-1]
        assert all(r.levelno == logging.INFO for r in caplog.records if r.name == "mend.repair.session")

    def test_failure_logged_at_warning(self, person_schema, caplog):
        with caplog.at_level(logging.INFO, logger="mend.repair.session"):
            _run(person_schema, StdlibRepairLogger(), '{"name": "Alice"}')

        last = [r for r in caplog.records if r.name == "mend.repair.session"][-1]
        assert last.levelno == logging.WARNING
        assert "repair_exhausted after 2 attempt(s)" in last.getMessage()

    def test_custom_target_logger(self, person_schema, caplog):
        target = logging.getLogger("app.llm")
        with caplog.at_level(logging.INFO, logger="app.llm"):
            _run(person_schema, StdlibRepairLogger(target), ALICE_FIXED)
        assert any(r.name == "app.llm" for r in caplog.records)


class TestJsonLinesRepairLogger:
    def test_one_line_per_event(self, person_schema):
        stream = io.StringIO()
        _run(person_schema, JsonLinesRepairLogger(stream), '{"name": "Alice"}')

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [r["event"] for r in records] == ["attempt", "attempt", "result"]
        assert records[0]["attempt_number"] == 1
        assert records[0]["violations_before_attempt"][0]["path"] == "$.age"
        assert records[-1]["status"] == "repair_exhausted"
        assert records[-1]["last_invalid_output"] == '{"name": "Alice"}'

    def test_prompts_omitted_by_default(self, person_schema):
        stream = io.StringIO()
        _run(person_schema, JsonLinesRepairLogger(stream), ALICE_FIXED)
        assert "prompt_text" not in stream.getvalue()

    def test_prompts_included_on_request(self, person_schema):
        stream = io.StringIO()
        _run(person_schema, JsonLinesRepairLogger(stream, include_prompts=True), ALICE_FIXED)

        attempt, result = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert "OUTPUT>>>" in attempt["prompt_text"]
        assert result["attempts"][0]["prompt_text"] == attempt["prompt_text"]

    def test_invalid_output_record(self, person_schema):
        stream = io.StringIO()
        _run(person_schema, JsonLinesRepairLogger(stream), '{"name": ')

        result = json.loads(stream.getvalue().splitlines()[-1])
        assert result["status"] == "repair_invalid_output"
        assert result["parse_error"]


class TestConsoleRepairLogger:
    def test_prints_attempts_and_result(self, person_schema):
        buf = io.StringIO()
        _run(person_schema, ConsoleRepairLogger(Console(file=buf, width=120)), ALICE_FIXED)

        text = buf.getvalue()
        assert "attempt 1" in text
        assert "$.age [missing_field]" in text
        assert "repaired (1 attempt(s))" in text

    def test_prints_failure_kind(self, person_schema):
        buf = io.StringIO()
        _run(
            person_schema,
            ConsoleRepairLogger(Console(file=buf, width=120)),
            config=RepairConfig.disabled(),
        )
        assert "repair_disabled after 0 attempt(s)" in buf.getvalue()


class TestCompositeRepairLogger:
    def test_fans_out_in_order(self, person_schema):
        first, second = RecordingLogger(), RecordingLogger()
        _run(person_schema, CompositeRepairLogger([first, second]), ALICE_FIXED)
        assert first.events == second.events
        assert [kind for kind, _ in first.events] == ["attempt", "result"]

    def test_broken_sink_does_not_starve_others(self, person_schema, caplog):
        broken, healthy = BrokenLogger(), RecordingLogger()
        with caplog.at_level(logging.WARNING, logger="mend.sinks"):
            _run(person_schema, CompositeRepairLogger([broken, healthy]), ALICE_FIXED)

        assert broken.calls == 2
        assert len(healthy.events) == 2
        assert "BrokenLogger.log_attempt failed" in caplog.text
