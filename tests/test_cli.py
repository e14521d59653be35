"""CLI integration tests for inventory-lookup."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from inventory_lookup import __version__
from inventory_lookup.cli import app

from conftest import HEADER, build_workbook, replace_member

runner = CliRunner()


def _write_workbook(tmp_path: Path, rows: list[list[object]], name: str = "data.xlsx") -> Path:
    path = tmp_path / name
    path.write_bytes(build_workbook(rows))
    return path


def _sample(tmp_path: Path) -> Path:
    return _write_workbook(
        tmp_path,
        [
            HEADER,
            ["Acme Foods", "Milk", 15, "2024-05-01", "A1"],
            ["Best Co", "Acme Juice", "", 45000, "B2"],
            [None, None, 3, None, None],
        ],
    )


def test_search_lists_matches(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "acme", "--source", str(source)])

    assert result.exit_code == 0
    assert "Loaded 2 rows" in result.stdout
    assert "Search results: 2" in result.stdout
    assert "Milk" in result.stdout
    assert "2023-03-15" in result.stdout


def test_search_reads_source_from_environment(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "milk"], env={"INVLOOKUP_SOURCE": str(source)})

    assert result.exit_code == 0
    assert "Search results: 1" in result.stdout


def test_search_without_match_says_so(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "zebra", "--source", str(source)])

    assert result.exit_code == 0
    assert "No results." in result.stdout


def test_search_keep_blank_rows_flag(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "acme", "-s", str(source), "--keep-blank-rows"])

    assert result.exit_code == 0
    assert "Loaded 3 rows" in result.stdout


def test_search_limit_flag(tmp_path: Path) -> None:
    source = _sample(tmp_path)
    out = tmp_path / "matches.json"

    result = runner.invoke(
        app,
        ["search", "acme", "-s", str(source), "--limit", "1", "--json", str(out), "--quiet"],
    )

    assert result.exit_code == 0
    assert "Loaded" not in result.stdout
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [row["company"] for row in data] == ["Acme Foods"]


def test_search_open_shows_detail_panel(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "acme", "-s", str(source), "--open", "2"])

    assert result.exit_code == 0
    assert "Storage bin" in result.stdout
    assert "Incoming" in result.stdout
    assert "B2" in result.stdout


def test_search_open_out_of_range_fails(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "milk", "-s", str(source), "--open", "5"])

    assert result.exit_code == 2
    assert "No result #5" in result.stdout


def test_search_missing_file_exits_2(tmp_path: Path) -> None:
    result = runner.invoke(app, ["search", "acme", "-s", str(tmp_path / "missing.xlsx")])

    assert result.exit_code == 2
    assert "Load failed" in result.stdout


def test_search_text_file_renamed_xlsx_exits_2(tmp_path: Path) -> None:
    fake = tmp_path / "fake.xlsx"
    fake.write_text("company,product\nAcme,Milk\n", encoding="utf-8")

    result = runner.invoke(app, ["search", "acme", "-s", str(fake)])

    assert result.exit_code == 2
    assert "Could not read the spreadsheet" in result.stdout


def test_search_workbook_with_malformed_sheet_xml_exits_2(tmp_path: Path) -> None:
    source = _sample(tmp_path)
    source.write_bytes(replace_member(source.read_bytes(), "xl/worksheets/sheet1.xml"))

    result = runner.invoke(app, ["search", "acme", "-s", str(source)])

    assert result.exit_code == 2
    assert "Could not read the spreadsheet" in result.stdout


def test_search_alias_extends_header_matching(tmp_path: Path) -> None:
    source = _write_workbook(tmp_path, [["Vendor", "Item", "Shelf"], ["Acme", "Milk", "Z1"]])

    result = runner.invoke(
        app,
        [
            "search", "acme", "-s", str(source),
            "--alias", "company=Vendor",
            "--alias", "product=Item",
            "--alias", "storage_bin=Shelf",
        ],
    )

    assert result.exit_code == 0
    assert "Search results: 1" in result.stdout
    assert "Z1" in result.stdout


def test_search_bad_alias_exits_2(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(app, ["search", "acme", "-s", str(source), "--alias", "colour=Red"])

    assert result.exit_code == 2
    assert "Unknown field" in result.stdout


def test_profile_not_found_exits_2(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(
        app, ["search", "acme", "-s", str(source), "--profile", str(tmp_path / "nope.txt")]
    )

    assert result.exit_code == 2
    assert "Profile not found" in result.stdout


def test_validate_pass_writes_load_report(tmp_path: Path) -> None:
    source = _sample(tmp_path)
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["validate", "-s", str(source), "--out-dir", str(out_dir)])

    assert result.exit_code == 0
    assert "Load Summary" in result.stdout
    assert "PASS" in result.stdout
    report = json.loads((out_dir / "load_report.json").read_text(encoding="utf-8"))
    assert report["rows_in"] == 3
    assert report["rows_out"] == 2
    assert report["dropped_rows"] == 1
    assert report["missing_fields"] == []


def test_validate_without_known_headers_fails(tmp_path: Path) -> None:
    source = _write_workbook(tmp_path, [["foo", "bar"], [1, 2]])

    result = runner.invoke(app, ["validate", "-s", str(source), "--quiet"])

    assert result.exit_code == 2
    assert "No recognizable headers" in result.stdout


def test_validate_with_profile(tmp_path: Path) -> None:
    source = _write_workbook(tmp_path, [["foo", "bar"], ["Acme", "A1"]])
    profile = tmp_path / "aliases.txt"
    profile.write_text("# custom sheet\ncompany=foo\nstorage_bin=bar\n", encoding="utf-8")

    result = runner.invoke(
        app, ["validate", "-s", str(source), "--profile", str(profile), "--quiet"]
    )

    assert result.exit_code == 0


def test_browse_searches_and_opens_detail(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(
        app, ["browse", "-s", str(source)], input="milk\n:open 1\n:quit\n"
    )

    assert result.exit_code == 0
    assert "Loaded 2 rows" in result.stdout
    assert "Search results: 1" in result.stdout
    assert "Storage bin" in result.stdout


def test_browse_upload_mode_starts_empty_and_loads_on_demand(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(
        app,
        ["browse", "--variant", "upload"],
        input=f"milk\n:load {source}\nmilk\n:reset\nmilk\n",
    )

    assert result.exit_code == 0
    assert result.stdout.count("No data loaded") == 2
    assert "Loaded 3 rows" in result.stdout
    assert "Search results: 1" in result.stdout
    assert "Cleared." in result.stdout


def test_browse_reports_bad_commands(tmp_path: Path) -> None:
    source = _sample(tmp_path)

    result = runner.invoke(
        app, ["browse", "-s", str(source)], input=":open x\n:frobnicate\n:open 3\n"
    )

    assert result.exit_code == 0
    assert "Not a result number" in result.stdout
    assert "Unknown command" in result.stdout
    assert "No result #3" in result.stdout


def test_version_flag_prints_and_exits() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"inventory-lookup v{__version__}" in result.stdout
