# tests/core/test_check_links_handler.py
import json
from unittest.mock import patch

import pytest

from mdlinkcheck.handlers.check_links_handler import build_options, build_parser, handle_check_links
from mdlinkcheck.managers.config_manager import config_manager
from mdlinkcheck.model import DEFAULT_IGNORE


def test_defaults_come_from_settings():
    options = build_options(build_parser().parse_args([]))

    assert options.pattern == "**/*.md"
    assert options.ignore == DEFAULT_IGNORE
    assert options.check_external is False
    assert options.external_timeout_ms == 10000


def test_cli_flags_override_settings():
    args = build_parser().parse_args([
        "docs", "-p", "**/*.markdown", "-i", "drafts/**", "vendor/**",
        "--external", "--external-timeout-ms", "2500",
    ])
    options = build_options(args)

    assert args.directory == "docs"
    assert options.pattern == "**/*.markdown"
    assert options.ignore == ["drafts/**", "vendor/**"]
    assert options.check_external is True
    assert options.external_timeout_ms == 2500


def test_exit_code_zero_and_report_file(tmp_path, capsys):
    (tmp_path / "index.md").write_text("# Home\n\n[self](#home)\n", encoding="utf-8")
    report_path = tmp_path / "link-report.json"

    exit_code = handle_check_links([str(tmp_path), "--output", str(report_path)])

    assert exit_code == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["summary"]["success"] is True
    assert report["summary"]["totalLinks"] == 1
    assert "All links are valid" in capsys.readouterr().out


def test_exit_code_one_on_broken_links(tmp_path, capsys):
    (tmp_path / "index.md").write_text("[gone](missing)\n", encoding="utf-8")

    assert handle_check_links([str(tmp_path)]) == 1

    out = capsys.readouterr().out
    assert "Found 1 broken links" in out
    assert "index.md:1:1" in out
    assert "Link: [gone](missing)" in out
    assert "Reason: File not found" in out


def test_missing_directory_is_a_fatal_error(tmp_path, capsys):
    assert handle_check_links([str(tmp_path / "nope")]) == 1
    assert "Error" in capsys.readouterr().out


def test_external_checking_is_passed_to_the_controller(tmp_path):
    with patch("mdlinkcheck.handlers.check_links_handler.LinkCheckController") as controller_class:
        controller_class.return_value.run.return_value.summary.success = True
        with patch("mdlinkcheck.handlers.check_links_handler.ReportManager"):
            assert handle_check_links([str(tmp_path), "-e"]) == 0

    options = controller_class.call_args.args[0]
    assert options.check_external is True


@pytest.fixture
def restore_config():
    yield config_manager
    config_manager.reset()


def test_absolute_pattern_inside_the_root(tmp_path, capsys):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "a.md").write_text("[b](b.md)\n", encoding="utf-8")
    (tmp_path / "docs" / "b.md").write_text("# B\n", encoding="utf-8")
    report_path = tmp_path / "report.json"

    exit_code = handle_check_links([
        str(tmp_path), "-p", f"{tmp_path}/docs/*.md", "--output", str(report_path),
    ])

    assert exit_code == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert list(report["fileDetails"]) == ["docs/a.md"]


def test_absolute_pattern_outside_the_root_is_a_fatal_error(tmp_path, capsys):
    (tmp_path / "docs").mkdir()
    (tmp_path / "other").mkdir()

    exit_code = handle_check_links([str(tmp_path / "docs"), "-p", f"{tmp_path}/other/*.md"])

    assert exit_code == 1
    assert "Error: Invalid pattern" in capsys.readouterr().out


def test_set_overrides_reach_the_options(tmp_path, restore_config):
    with patch("mdlinkcheck.handlers.check_links_handler.LinkCheckController") as controller_class:
        controller_class.return_value.run.return_value.summary.success = True
        with patch("mdlinkcheck.handlers.check_links_handler.ReportManager"):
            exit_code = handle_check_links([
                str(tmp_path),
                "--set", "link_checker.timeout_ms=2500",
                "--set", "link_checker.check_external=true",
            ])

    assert exit_code == 0
    options = controller_class.call_args.args[0]
    assert options.external_timeout_ms == 2500
    assert options.check_external is True


def test_malformed_set_override_is_a_fatal_error(tmp_path, capsys, restore_config):
    assert handle_check_links([str(tmp_path), "--set", "timeout_ms"]) == 1
    assert "Error: Invalid override" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-5"])
def test_non_positive_timeout_falls_back_with_a_warning(value, caplog):
    args = build_parser().parse_args(["--external-timeout-ms", value])

    with caplog.at_level("WARNING", logger="mdlinkcheck.model"):
        options = build_options(args)

    assert options.external_timeout_ms == 10000
    assert "must be positive" in caplog.text
