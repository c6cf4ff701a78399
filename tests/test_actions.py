# tests/test_actions.py
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from linerun.actions import (
    ActionRunner, launch_detached, resolve_path, working_directory_for,
)
from linerun.config_handler import DispatchConfig


@pytest.fixture
def dispatch_config():
    return DispatchConfig(open_command="my-open", terminal_command="my-term", terminal_execute_arg="-x")


@pytest.fixture
def open_in_editor():
    return MagicMock()


@pytest.fixture
def runner(dispatch_config, tmp_path, open_in_editor):
    return ActionRunner(dispatch_config, str(tmp_path), open_in_editor=open_in_editor)


@pytest.fixture
def mock_popen():
    with patch("linerun.actions.subprocess.Popen") as popen:
        yield popen


# --- Path helpers ---

def test_working_directory_for_document(tmp_path):
    doc = tmp_path / "notes.txt"
    assert working_directory_for(str(doc)) == str(tmp_path)


def test_working_directory_without_document_is_cwd():
    assert working_directory_for(None) == os.getcwd()


def test_resolve_path_relative_and_absolute(tmp_path):
    assert resolve_path("a/b.txt", str(tmp_path)) == str(tmp_path / "a" / "b.txt")
    assert resolve_path("/etc/hosts", str(tmp_path)) == "/etc/hosts"
    assert resolve_path("~/x", str(tmp_path)) == os.path.join(os.path.expanduser("~"), "x")


# --- Launching ---

def test_launch_detached_does_not_wait(mock_popen, tmp_path):
    assert launch_detached(["prog", "arg"], str(tmp_path)) is True
    mock_popen.assert_called_once_with(
        ["prog", "arg"], cwd=str(tmp_path), shell=False,
        stdin=subprocess.DEVNULL, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    mock_popen.return_value.wait.assert_not_called()
    mock_popen.return_value.communicate.assert_not_called()


def test_launch_detached_reports_missing_program(mock_popen, tmp_path):
    mock_popen.side_effect = FileNotFoundError("no such program")
    assert launch_detached(["missing"], str(tmp_path)) is False


# --- Actions ---

def test_open_file_uses_editor_callback(runner, open_in_editor, tmp_path, mock_popen):
    assert runner.open_file("notes/todo.md") is True
    open_in_editor.assert_called_once_with(str(tmp_path / "notes" / "todo.md"))
    mock_popen.assert_not_called()


def test_open_file_without_editor_still_handles(dispatch_config, tmp_path):
    runner = ActionRunner(dispatch_config, str(tmp_path))
    assert runner.open_file("x.txt") is True


def test_open_with_default_resolves_path(runner, mock_popen, tmp_path):
    assert runner.open_with_default("report.pdf") is True
    args = mock_popen.call_args
    assert args.args[0] == ["my-open", str(tmp_path / "report.pdf")]
    assert args.kwargs["cwd"] == str(tmp_path)


def test_run_in_terminal_passes_command_as_one_argument(runner, mock_popen):
    assert runner.run_in_terminal("echo hi && sleep 1") is True
    assert mock_popen.call_args.args[0] == ["my-term", "-x", "echo hi && sleep 1"]


def test_open_url(runner, mock_popen):
    assert runner.open_url("https://example.com") is True
    assert mock_popen.call_args.args[0] == ["my-open", "https://example.com"]


def test_is_directory(runner, tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "file.txt").write_text("x")
    assert runner.is_directory("sub") is True
    assert runner.is_directory(str(tmp_path)) is True
    assert runner.is_directory("file.txt") is False
    assert runner.is_directory("missing") is False
    assert runner.is_directory("") is False


def test_open_terminal_in_directory(runner, mock_popen, tmp_path):
    (tmp_path / "sub").mkdir()
    assert runner.open_terminal_in_directory("sub") is True
    args = mock_popen.call_args
    assert args.args[0] == ["my-term"]
    assert args.kwargs["cwd"] == str(tmp_path / "sub")


def test_run_silently_uses_shell(runner, mock_popen, tmp_path):
    assert runner.run_silently("make build") is True
    args = mock_popen.call_args
    assert args.args[0] == "make build"
    assert args.kwargs["shell"] is True
    assert args.kwargs["cwd"] == str(tmp_path)


def test_launch_failure_still_counts_as_handled(runner, mock_popen):
    mock_popen.side_effect = FileNotFoundError("my-term")
    assert runner.run_in_terminal("htop") is True
    assert runner.run_silently("true") is True
