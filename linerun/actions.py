# linerun/actions.py

import os
import subprocess
import logging
from typing import Callable, List, Optional

from linerun.config_handler import DispatchConfig

logger = logging.getLogger(__name__)


def working_directory_for(document_path: Optional[str]) -> str:
    """The directory holding the open document, or the process cwd when it has no path."""
    if document_path:
        return os.path.dirname(os.path.abspath(os.path.expanduser(document_path)))
    return os.getcwd()


def resolve_path(payload: str, working_directory: str) -> str:
    """Expands ~ and makes a relative payload absolute against working_directory."""
    expanded = os.path.expanduser(payload)
    if os.path.isabs(expanded):
        return expanded
    return os.path.abspath(os.path.join(working_directory, expanded))


def launch_detached(args, cwd: str, shell: bool = False) -> bool:
    """
    Starts a process in its own session without waiting for it.

    The child's exit status is never collected. A failure to start (missing
    program, bad cwd) is logged and swallowed here so it never reaches the
    editor loop.

    Returns:
        bool: True if the process was started.
    """
    try:
        subprocess.Popen(
            args,
            cwd=cwd,
            shell=shell,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        logger.info(f"Launched {args!r} in '{cwd}'")
        return True
    except OSError as e:
        logger.error(f"Error launching {args!r} in '{cwd}': {e}")
        return False


class ActionRunner:
    """
    The built-in actions. Each takes an already matched payload and reports
    True once the action has been carried out or launched.
    """

    def __init__(self, config: DispatchConfig, working_directory: str,
                 open_in_editor: Optional[Callable[[str], bool]] = None):
        self.config = config
        self.working_directory = working_directory
        self.open_in_editor = open_in_editor

    def _launch(self, args: List[str], cwd: Optional[str] = None) -> bool:
        # A launch failure still counts as handled; falling through would
        # hand the prefixed text to the shell fallback.
        launch_detached(args, cwd or self.working_directory)
        return True

    def open_file(self, payload: str) -> bool:
        path = resolve_path(payload, self.working_directory)
        if self.open_in_editor is None:
            logger.warning(f"No editor attached; cannot open '{path}'.")
            return True
        logger.info(f"Opening '{path}' in the editor.")
        self.open_in_editor(path)
        return True

    def open_with_default(self, payload: str) -> bool:
        path = resolve_path(payload, self.working_directory)
        return self._launch([self.config.open_command, path])

    def run_in_terminal(self, payload: str) -> bool:
        return self._launch([self.config.terminal_command, self.config.terminal_execute_arg, payload])

    def open_url(self, url: str) -> bool:
        return self._launch([self.config.open_command, url])

    def is_directory(self, payload: str) -> bool:
        if not payload:
            return False
        return os.path.isdir(resolve_path(payload, self.working_directory))

    def open_terminal_in_directory(self, payload: str) -> bool:
        directory = resolve_path(payload, self.working_directory)
        return self._launch([self.config.terminal_command], cwd=directory)

    def run_silently(self, command: str) -> bool:
        logger.info(f"Running '{command}' without a terminal in '{self.working_directory}'")
        launch_detached(command, self.working_directory, shell=True)
        return True
