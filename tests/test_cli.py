"""Tests for the CLI."""

import json
from pathlib import Path

from typer.testing import CliRunner

from pgbgwriter.cli.main import app, format_sql

runner = CliRunner()


class TestCLI:
    def test_help(self):
        """CLI shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "background writer" in result.output

    def test_list_fields(self):
        result = runner.invoke(app, ["list", "fields"])
        assert result.exit_code == 0
        assert "pg.checkpoints_timed" in result.output
        assert "pg.buffers_alloc" in result.output

    def test_list_keys(self):
        result = runner.invoke(app, ["list", "keys"])
        assert result.exit_code == 0
        assert "pg.checkpoint_time_ratio" in result.output
        assert "pg.stats_reset_interval" in result.output

    def test_list_unknown_type(self):
        result = runner.invoke(app, ["list", "tables"])
        assert result.exit_code == 1
        assert "Unknown type" in result.output

    def test_list_fields_for_server_version(self):
        result = runner.invoke(app, ["list", "fields", "--server-version", "170002"])
        assert result.exit_code == 0
        assert "pg.checkpoints_timed" in result.output
        assert "pg.buffers_backend" not in result.output

    def test_list_fields_includes_legacy_columns(self):
        result = runner.invoke(app, ["list", "fields"])
        assert "pg.buffers_backend" in result.output

    def test_show_sql(self):
        result = runner.invoke(app, ["show-sql", "pg.buffers_clean"])
        assert result.exit_code == 0
        assert "pg_stat_bgwriter" in result.output

    def test_show_sql_for_pg17(self):
        result = runner.invoke(
            app, ["show-sql", "pg.checkpoints_timed", "--server-version", "170002"]
        )
        assert result.exit_code == 0
        assert "pg_stat_checkpointer" in result.output

    def test_show_sql_invalid_action(self):
        result = runner.invoke(app, ["show-sql", "pg.checkpoint_time_ratio[,,bogus]"])
        assert result.exit_code == 1
        assert "Invalid action parameter: bogus" in result.output


class TestGetCommand:
    def test_get_from_snapshot(self, snapshot_csv: Path):
        result = runner.invoke(app, ["get", "pg.checkpoints_timed", "--snapshot", str(snapshot_csv)])
        assert result.exit_code == 0
        assert result.output.strip() == "10"

    def test_get_json(self, snapshot_csv: Path):
        result = runner.invoke(
            app,
            ["get", "pg.buffers_alloc", "--snapshot", str(snapshot_csv), "--output", "json"],
        )
        assert result.exit_code == 0

        payload = json.loads(result.output)
        assert payload == {"key": "pg.buffers_alloc", "value": 900, "type": "integer"}

    def test_get_derived_key(self, snapshot_csv: Path):
        result = runner.invoke(
            app, ["get", "pg.checkpoint_avg_interval", "--snapshot", str(snapshot_csv)]
        )
        assert result.exit_code == 0
        assert float(result.output.strip()) > 0

    def test_get_invalid_action(self, snapshot_csv: Path):
        result = runner.invoke(
            app, ["get", "pg.checkpoint_time_ratio[,,bogus]", "--snapshot", str(snapshot_csv)]
        )
        assert result.exit_code == 1
        assert "Invalid action parameter: bogus" in result.output

    def test_get_unknown_column(self, snapshot_csv: Path):
        result = runner.invoke(app, ["get", "pg.nope", "--snapshot", str(snapshot_csv)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_get_malformed_snapshot(self, tmp_path: Path):
        """A CSV missing stats_reset is a reported error, not a traceback."""
        path = tmp_path / "partial.csv"
        path.write_text("checkpoints_timed,checkpoints_req\n10,2\n")

        result = runner.invoke(app, ["get", "pg.checkpoints_timed", "--snapshot", str(path)])
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Error loading snapshot" in result.output

    def test_get_shows_executed_sql(self, snapshot_csv: Path):
        result = runner.invoke(
            app, ["get", "pg.buffers_clean", "--snapshot", str(snapshot_csv), "--sql"]
        )
        assert result.exit_code == 0
        assert "pg_stat_bgwriter" in result.output
        assert result.output.strip().endswith("50")

    def test_get_missing_snapshot(self, tmp_path: Path):
        result = runner.invoke(
            app, ["get", "pg.buffers_alloc", "--snapshot", str(tmp_path / "nope.csv")]
        )
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_get_missing_config(self, tmp_path: Path):
        result = runner.invoke(
            app, ["get", "pg.buffers_alloc", "--config", str(tmp_path / "nope.yaml")]
        )
        assert result.exit_code == 1
        assert "Error loading settings" in result.output


class TestFormatSql:
    def test_pretty_prints(self):
        sql = format_sql("SELECT buffers_clean FROM pg_stat_bgwriter")
        assert "SELECT" in sql
        assert "pg_stat_bgwriter" in sql

    def test_unparseable_sql_returned_as_is(self):
        assert format_sql("SELECT (((") == "SELECT ((("
