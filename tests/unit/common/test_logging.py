from __future__ import annotations

import json
import logging
from uuid import UUID

from console_api.common.logging import (
    ConsoleLogFormatter,
    JsonLogFormatter,
    bind_request_context,
    clear_request_context,
    log_context,
)

TEAM_ID = UUID("00000000-0000-0000-0000-0000000000aa")


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="console_api.features.teams.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="teams.create.success",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_log_context_stringifies_identifiers() -> None:
    assert log_context(team_id=TEAM_ID, operator_id="op-1", menu_count=2) == {
        "team_id": str(TEAM_ID),
        "operator_id": "op-1",
        "menu_count": 2,
    }
    assert log_context() == {}


def test_console_formatter_appends_sorted_extras() -> None:
    bind_request_context("req-7")
    try:
        line = ConsoleLogFormatter().format(_record(**log_context(team_id=TEAM_ID, parent_id=None)))
    finally:
        clear_request_context()

    assert "[cid=req-7] teams.create.success" in line
    assert line.endswith(f"parent_id=null team_id={TEAM_ID}")


def test_json_formatter_emits_one_object() -> None:
    payload = json.loads(JsonLogFormatter().format(_record(**log_context(user_id=TEAM_ID))))

    assert payload["message"] == "teams.create.success"
    assert payload["service"] == "console-api"
    assert payload["correlation_id"] == "-"
    assert payload["user_id"] == str(TEAM_ID)
    assert payload["timestamp"].endswith("Z")
