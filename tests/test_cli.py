import pytest
from click.testing import CliRunner

from cstream_ingest import cli

SIBNET_TEXT = "var eps = ['https://sibnet.ru/v/1','https://sibnet.ru/v/2', 'oops']"


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "episodes.js"
    path.write_text(SIBNET_TEXT, encoding="utf-8")
    return path


def test_parse_prints_detected_arrays(source_file):
    result = CliRunner().invoke(cli.main, ["parse", str(source_file)])

    assert result.exit_code == 0, result.output
    assert "Strategy: named_arrays" in result.output
    assert "eps: Sibnet (2 URL(s))" in result.output
    assert "Skipped 1 invalid literal(s)" in result.output


def test_parse_reads_stdin():
    result = CliRunner().invoke(
        cli.main, ["parse", "-"], input="https://vudeo.net/1\nhttps://vudeo.net/2\n"
    )

    assert result.exit_code == 0, result.output
    assert "Strategy: line_list" in result.output
    assert "default: Vudeo (2 URL(s))" in result.output


def test_parse_without_urls_fails(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("nothing here", encoding="utf-8")

    result = CliRunner().invoke(cli.main, ["parse", str(path)])

    assert result.exit_code == 1
    assert "No valid URL found" in result.output


def test_import_dry_run(source_file):
    result = CliRunner().invoke(
        cli.main,
        [
            "import",
            str(source_file),
            "--catalog-id",
            "1399",
            "--title",
            "Show",
            "--dry-run",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Show - Sibnet: S01 E01-E02" in result.output
    assert "insert: done_success (2 succeeded, 0 failed of 2)" in result.output


def test_import_requires_store_credentials(source_file):
    result = CliRunner().invoke(
        cli.main,
        ["import", str(source_file), "--catalog-id", "1", "--title", "Show"],
    )

    assert result.exit_code == 2
    assert "STORE_URL" in result.output


def test_import_validation_error_is_reported(source_file):
    result = CliRunner().invoke(
        cli.main,
        [
            "import",
            str(source_file),
            "--catalog-id",
            "0",
            "--title",
            "Show",
            "--dry-run",
        ],
    )

    assert result.exit_code == 1
    assert "A linked catalog id is required" in result.output


def test_delete_rejects_malformed_ids():
    result = CliRunner().invoke(cli.main, ["delete", "not-a-uuid", "--dry-run"])

    assert result.exit_code == 1
    assert "Invalid record id format: not-a-uuid" in result.output


def test_delete_dry_run_succeeds_for_unknown_ids():
    result = CliRunner().invoke(
        cli.main, ["delete", "00000000-0000-4000-8000-000000000001", "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert "delete: done_success (1 succeeded, 0 failed of 1)" in result.output


def test_create_dry_run_prints_final_url():
    result = CliRunner().invoke(
        cli.main,
        [
            "create",
            "--label",
            "Show - Host S02E03",
            "--url",
            "https://host.tv/show",
            "--catalog-id",
            "12",
            "--media-kind",
            "series",
            "--season",
            "2",
            "--episode",
            "3",
            "--dry-run",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "https://host.tv/show/season/2/episode/3" in result.output


def test_invalid_log_level():
    result = CliRunner().invoke(cli.main, ["--log-level", "loud", "parse", "-"])

    assert result.exit_code == 2
