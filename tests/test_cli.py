"""CLI smoke tests."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ft_sniper.cli import cli


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for name in ("RPC_URL", "FT_SNIPER_RPC_URL", "FT_SNIPER_DB_PATH"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "sniper.toml"
    path.write_text(
        f'[sync]\ndefault_start_block = 500\n\n[storage]\ndb_path = "{tmp_path / "state.db"}"\n'
    )
    return str(path)


def test_status_without_rpc(config_file):
    result = CliRunner().invoke(cli, ["-c", config_file, "status"])

    assert result.exit_code == 0
    assert "(not set)" in result.output
    assert "Start block:    500" in result.output


def test_run_requires_rpc(config_file):
    result = CliRunner().invoke(cli, ["-c", config_file, "run"])

    assert result.exit_code == 1


def test_checkpoint_show_and_set(config_file):
    runner = CliRunner()

    shown = runner.invoke(cli, ["-c", config_file, "checkpoint"])
    assert shown.exit_code == 0
    assert "Synced block:    500" in shown.output

    updated = runner.invoke(cli, ["-c", config_file, "checkpoint", "--set", "12345"])
    assert updated.exit_code == 0
    assert "Synced block:    12345" in updated.output

    again = runner.invoke(cli, ["-c", config_file, "checkpoint"])
    assert "Synced block:    12345" in again.output
