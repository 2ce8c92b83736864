"""Tests for swagnote.output: streams, table formats and diagnostics."""

from __future__ import annotations

import json

import pytest

from swagnote import output as output_module
from swagnote.models import Diagnostic, Severity
from swagnote.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("swagnote.output._is_tty", lambda: False)


@pytest.fixture()
def colour_tty(monkeypatch):
    """An interactive stdout with no colour opt-out in the environment."""
    monkeypatch.setattr("swagnote.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


def plain_manager(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format and colour selection
# ------------------------------------------------------------------ #


class TestFormatSelection:
    def test_piped_stdout_gets_plain_tables(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_terminal_gets_rich_tables(self, colour_tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_no_color_on_terminal_gets_plain_tables(self, colour_tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_json_flag_is_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


@pytest.mark.parametrize(
    ("environ", "disabled"),
    [
        ({"NO_COLOR": ""}, True),
        ({"NO_COLOR": "1", "TERM": "xterm"}, True),
        ({"TERM": "dumb"}, True),
        ({"TERM": "xterm-256color"}, False),
        ({}, False),
    ],
)
def test_colour_opt_out(monkeypatch, environ, disabled):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)
    for name, value in environ.items():
        monkeypatch.setenv(name, value)
    assert _should_disable_color() is disabled


# ------------------------------------------------------------------ #
# Streams
# ------------------------------------------------------------------ #


class TestStreams:
    def test_document_text_goes_to_stdout_only(self, capfd, non_tty):
        plain_manager().print_data('{"swagger": "2.0"}')
        captured = capfd.readouterr()
        assert (captured.out, captured.err) == ('{"swagger": "2.0"}\n', "")

    @pytest.mark.parametrize("level", ["info", "success", "warning", "error"])
    def test_messages_go_to_stderr_only(self, capfd, non_tty, level):
        getattr(plain_manager(), level)("wrote swagger.json")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "wrote swagger.json" in captured.err

    def test_prefixes(self, capfd, non_tty):
        mgr = plain_manager()
        mgr.warning("field dropped")
        mgr.error("package missing")
        assert capfd.readouterr().err.splitlines() == [
            "Warning: field dropped",
            "Error: package missing",
        ]

    def test_rich_console_prints_brackets_literally(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        OutputManager(format=OutputFormat.PLAIN).error("bad line @Router /pets [get]")
        assert "[get]" in capfd.readouterr().err

    def test_quiet(self, capfd, non_tty):
        mgr = plain_manager(quiet=True)
        mgr.info("scanning")
        mgr.success("done")
        mgr.warning("field dropped")
        mgr.error("package missing")
        assert capfd.readouterr().err.splitlines() == [
            "Warning: field dropped",
            "Error: package missing",
        ]

    def test_debug_only_when_verbose(self, capfd, non_tty):
        plain_manager().debug("hidden")
        plain_manager(verbose=True).debug("shown")
        assert capfd.readouterr().err == "[debug] shown\n"


# ------------------------------------------------------------------ #
# Tables
# ------------------------------------------------------------------ #


class TestPrintTable:
    HEADERS = ["Method", "Path"]
    ROWS = [["GET", "/pets"], ["POST", "/pets/{id}"]]

    def test_json_records(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).print_table(self.HEADERS, self.ROWS)
        assert json.loads(capfd.readouterr().out) == [
            {"Method": "GET", "Path": "/pets"},
            {"Method": "POST", "Path": "/pets/{id}"},
        ]

    def test_tab_separated(self, capfd, non_tty):
        plain_manager().print_table(self.HEADERS, self.ROWS, title="ignored")
        assert capfd.readouterr().out == "Method\tPath\nGET\t/pets\nPOST\t/pets/{id}\n"

    def test_rich_table_has_title(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="Petstore -- Paths (2)"
        )
        out = capfd.readouterr().out
        assert "Petstore -- Paths (2)" in out
        assert "/pets/{id}" in out


# ------------------------------------------------------------------ #
# Diagnostics
# ------------------------------------------------------------------ #


class TestDiagnostics:
    def test_by_severity_with_count(self, capfd, non_tty):
        plain_manager().diagnostics(
            [
                Diagnostic(severity=Severity.WARNING, message="field dropped", package="p", declaration="T"),
                Diagnostic(severity=Severity.ERROR, message="type missing", line="@Success 200 X"),
            ]
        )
        assert capfd.readouterr().err.splitlines() == [
            "Warning: p.T: field dropped",
            'Error: type missing (in "@Success 200 X")',
            "1 error(s), 1 warning(s)",
        ]

    def test_count_is_dropped_when_quiet(self, capfd, non_tty):
        plain_manager(quiet=True).diagnostics(
            [Diagnostic(severity=Severity.WARNING, message="field dropped")]
        )
        assert capfd.readouterr().err == "Warning: field dropped\n"

    def test_nothing_to_report(self, capfd, non_tty):
        plain_manager().diagnostics([])
        assert capfd.readouterr().err == ""


# ------------------------------------------------------------------ #
# Installed manager
# ------------------------------------------------------------------ #


class TestInstalledManager:
    def test_default_is_created_once(self):
        reset_output()
        assert get_output() is get_output()

    def test_helpers_use_installed_manager(self, capfd, non_tty):
        set_output(plain_manager())
        output_module.error("via helper")
        output_module.print_data("data")
        captured = capfd.readouterr()
        assert captured.err == "Error: via helper\n"
        assert captured.out == "data\n"
