"""
Tests for GitHub Actions runner integration.
"""

import os

from lazaruskit.core import actions


class TestGetInput:
    """Tests for reading action inputs."""

    def test_reads_hyphenated_input(self, monkeypatch):
        monkeypatch.setenv("INPUT_LAZARUS-VERSION", " 2.2.6 ")
        assert actions.get_input("lazarus-version") == "2.2.6"

    def test_unset_returns_default(self):
        assert actions.get_input("lazarus-version") is None
        assert actions.get_input("lazarus-version", "stable") == "stable"

    def test_blank_returns_default(self, monkeypatch):
        monkeypatch.setenv("INPUT_WITH-CACHE", "   ")
        assert actions.get_input("with-cache", "true") == "true"

    def test_spaces_become_underscores(self, monkeypatch):
        monkeypatch.setenv("INPUT_MY_INPUT", "x")
        assert actions.get_input("my input") == "x"


class TestAddPath:
    """Tests for PATH extension."""

    def test_writes_command_file_and_environment(self, runner_env, tmp_path):
        actions.add_path(tmp_path / "lazarus")

        assert runner_env["github_path"].read_text() == f"{tmp_path / 'lazarus'}\n"
        assert os.environ["PATH"].split(os.pathsep)[0] == str(tmp_path / "lazarus")

    def test_without_runner(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATH", "/usr/bin")

        actions.add_path(tmp_path)

        assert os.environ["PATH"] == f"{tmp_path}{os.pathsep}/usr/bin"


class TestExportVariable:
    """Tests for exporting environment variables."""

    def test_writes_heredoc(self, runner_env, tmp_path):
        actions.export_variable("FPCDIR", tmp_path / "fpc")

        lines = runner_env["github_env"].read_text().splitlines()
        assert lines[0].startswith("FPCDIR<<ghadelimiter_")
        assert lines[1] == str(tmp_path / "fpc")
        assert lines[2] == lines[0].split("<<", 1)[1]
        assert os.environ["FPCDIR"] == str(tmp_path / "fpc")


class TestWorkflowCommands:
    """Tests for annotations and log groups."""

    def test_set_failed_escapes_message(self, capsys):
        actions.set_failed("line one\nline two 100%")

        assert capsys.readouterr().out == "::error::line one%0Aline two 100%25\n"

    def test_group(self, capsys):
        with actions.group("Installing Lazarus"):
            print("inside")

        assert capsys.readouterr().out.splitlines() == [
            "::group::Installing Lazarus",
            "inside",
            "::endgroup::",
        ]

    def test_group_closed_on_error(self, capsys):
        try:
            with actions.group("Failing"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert capsys.readouterr().out.endswith("::endgroup::\n")
