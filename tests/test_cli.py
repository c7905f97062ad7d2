import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from tracklog.cli import app
from tracklog.connectors.valkey import ValkeyConnector

runner = CliRunner()


@pytest.fixture
def fake_connector(fake_valkey):
    """Every CLI invocation gets a fresh connector bound to the same fake."""
    def _build(_settings):
        conn = ValkeyConnector()
        conn._client = fake_valkey
        return conn

    with patch("tracklog.cli.ValkeyConnector.from_settings", side_effect=_build):
        yield fake_valkey


def test_append_show_list_delete(fake_connector):
    result = runner.invoke(app, ["append", '[{"event": "click"}, null, 2]', "--track-id", "t1"])
    assert result.exit_code == 0, result.output
    assert "t1: +2 (length 2)" in result.output

    result = runner.invoke(app, ["show", "t1"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert json.loads(lines[0].split(" ", 1)[1]) == {"event": "click"}
    assert lines[1] == "[1] 2"

    result = runner.invoke(app, ["show", "t1", "--limit", "1"])
    assert result.output.splitlines()[0] == "[1] 2"

    result = runner.invoke(app, ["list"])
    assert "t1" in result.output.splitlines()
    assert "1 track(s)" in result.output

    result = runner.invoke(app, ["delete", "t1"])
    assert "Deleted t1" in result.output
    result = runner.invoke(app, ["delete", "t1"])
    assert "does not exist" in result.output

def test_show_missing_track_exits_non_zero(fake_connector):
    result = runner.invoke(app, ["show", "ghost"])
    assert result.exit_code == 1

def test_append_rejects_invalid_json(fake_connector):
    result = runner.invoke(app, ["append", "{nope"])
    assert result.exit_code == 1
    assert fake_connector.lists == {}

def test_length(fake_connector):
    runner.invoke(app, ["append", '["a", "b", "c"]', "--track-id", "t1"])
    result = runner.invoke(app, ["length", "t1"])
    assert result.exit_code == 0
    assert result.output.strip() == "3"

    result = runner.invoke(app, ["length", "absent"])
    assert result.output.strip() == "0"
