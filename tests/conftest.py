# tests/conftest.py
#
# Project-wide fixtures for the linerun test suite.

import sys
import os

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.selection import SelectionState, SelectionType

# Add the project root to the Python path so 'linerun' and 'main' import
# without installing the package.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from linerun.text_source import DocumentTextSource


@pytest.fixture
def make_source():
    """Builds a DocumentTextSource with the cursor at the start of a given line."""
    def _make(text, cursor_row=0, selection=None, selection_type=SelectionType.CHARACTERS):
        lines = text.split("\n")
        cursor_row = min(cursor_row, len(lines) - 1)
        cursor_position = sum(len(line) + 1 for line in lines[:cursor_row])
        selection_state = None
        if selection is not None:
            start, end = selection
            cursor_position = end
            selection_state = SelectionState(original_cursor_position=start, type=selection_type)
        return DocumentTextSource(Document(text, cursor_position=cursor_position, selection=selection_state))
    return _make
