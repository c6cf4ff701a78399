# linerun/text_source.py

from typing import Optional, Protocol, Tuple

from prompt_toolkit.document import Document


class TextSource(Protocol):
    """Read-only view of an editor buffer, taken at dispatch time."""

    def line_count(self) -> int: ...

    def line_text(self, index: int) -> str: ...

    def cursor_line(self) -> int: ...

    def selection_range(self) -> Optional[Tuple[int, int]]: ...

    def selected_text(self) -> str: ...


class DocumentTextSource:
    """Adapts a prompt_toolkit Document (text, cursor and selection) to TextSource."""

    def __init__(self, document: Document):
        self.document = document
        self._lines = document.lines

    def line_count(self) -> int:
        return len(self._lines)

    def line_text(self, index: int) -> str:
        return self._lines[index]

    def cursor_line(self) -> int:
        return self.document.cursor_position_row

    def selection_range(self) -> Optional[Tuple[int, int]]:
        """Span of the selection as the editor reports it.

        Line-wise selections cover whole lines; in vi mode the end position
        is inclusive. Both are taken from `Document.selection_ranges()`.
        """
        if self.document.selection is None:
            return None
        ranges = list(self.document.selection_ranges())
        if not ranges:
            return None
        start, end = ranges[0][0], ranges[-1][1]
        if start >= end:
            return None
        return start, end

    def selected_text(self) -> str:
        if self.selection_range() is None:
            return ""
        return self.document.cut_selection()[1].text
