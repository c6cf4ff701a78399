# tests/test_main_startup.py

import pytest
from unittest.mock import MagicMock, patch

import main


@pytest.fixture
def quiet_main():
    """Stops run_editor from touching the real log file or shutting logging down."""
    with patch("main.setup_logging") as mock_setup, \
         patch("main.logging.shutdown") as mock_shutdown:
        yield mock_setup, mock_shutdown


def test_parse_args_optional_file():
    assert main.parse_args([]).file is None
    assert main.parse_args(["notes.txt"]).file == "notes.txt"


def test_run_editor_passes_config_and_file(quiet_main):
    config = {"handlers": ["shell"]}
    with patch("main.load_configuration", return_value=config) as mock_load, \
         patch("main.main_async_runner", new=MagicMock(return_value="coro")) as mock_runner, \
         patch("main.asyncio.run") as mock_run:
        main.run_editor(["notes.txt"])

    mock_load.assert_called_once()
    mock_runner.assert_called_once_with(config, "notes.txt")
    mock_run.assert_called_once_with("coro")
    quiet_main[1].assert_called_once()


def test_run_editor_reports_missing_config(quiet_main, capsys):
    with patch("main.load_configuration", side_effect=FileNotFoundError("no default config")), \
         patch("main.asyncio.run") as mock_run:
        main.run_editor([])

    mock_run.assert_not_called()
    out = capsys.readouterr().out
    assert "FATAL STARTUP ERROR: no default config" in out
    quiet_main[1].assert_called_once()


def test_run_editor_handles_keyboard_interrupt(quiet_main, capsys):
    with patch("main.load_configuration", return_value={}), \
         patch("main.main_async_runner", new=MagicMock()), \
         patch("main.asyncio.run", side_effect=KeyboardInterrupt):
        main.run_editor([])
    assert "Exiting linerun" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_main_async_runner_runs_application(tmp_path):
    fake_app = MagicMock()

    async def fake_run_async():
        return None

    fake_app.run_async = fake_run_async
    with patch("main.EditorUI") as mock_editor_cls:
        mock_editor_cls.return_value.create_application.return_value = fake_app
        await main.main_async_runner({"ui": {}}, str(tmp_path / "x.txt"))

    mock_editor_cls.assert_called_once_with({"ui": {}}, document_path=str(tmp_path / "x.txt"))
