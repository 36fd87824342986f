"""Tests for format_result mode selection."""

from __future__ import annotations

import json

from deriva.output.formatters import OutputSettings, format_result
from deriva.services.result import ServiceResult

RESULT = ServiceResult(
    ok=True,
    op="derive",
    data={"types": [{"name": "Pair", "operations": {}, "equations": []}]},
)


class TestFormatResult:
    def test_json(self) -> None:
        parsed = json.loads(format_result(RESULT, settings=OutputSettings(json_output=True)))
        assert parsed["ok"] is True
        assert parsed["data"]["types"][0]["name"] == "Pair"

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(RESULT, settings=OutputSettings(json_output=True, quiet=True))
        assert output.startswith("{")

    def test_quiet(self) -> None:
        assert format_result(RESULT, settings=OutputSettings(quiet=True)) == "Pair"

    def test_default_is_human(self) -> None:
        output = format_result(RESULT)
        assert output.startswith("OK  derive")
        assert "Pair" in output
