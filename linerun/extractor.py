# linerun/extractor.py

import logging

from linerun.text_source import TextSource

logger = logging.getLogger(__name__)

DEFAULT_CONTINUATION_CHAR = "\\"


def _ends_with_marker(line: str, continuation_char: str) -> bool:
    """True when the last non-whitespace character of the line is the marker."""
    return line.rstrip().endswith(continuation_char)


def _scan_down(source: TextSource, start_line: int, continuation_char: str) -> int:
    """Returns the index of the last line of the block that begins at start_line."""
    last = source.line_count() - 1
    line = start_line
    while line < last and _ends_with_marker(source.line_text(line), continuation_char):
        line += 1
    return line


def _scan_up(source: TextSource, cursor_line: int, continuation_char: str) -> int:
    """Returns the first line of the block containing cursor_line."""
    start = cursor_line
    # Each step strictly decreases start, so the walk always terminates.
    while start > 0 and _ends_with_marker(source.line_text(start - 1), continuation_char):
        start -= 1
    return start


def join_continued_lines(lines, continuation_char: str = DEFAULT_CONTINUATION_CHAR) -> str:
    """
    Joins physical lines into one logical command.

    Each line is trimmed, loses a single trailing marker, and is trimmed again;
    empty fragments are dropped and the rest are joined with single spaces.
    """
    fragments = []
    for line in lines:
        fragment = line.strip()
        if continuation_char and fragment.endswith(continuation_char):
            fragment = fragment[:-len(continuation_char)].rstrip()
        if fragment:
            fragments.append(fragment)
    return " ".join(fragments)


def extract_logical_command(source: TextSource, cursor_line: int,
                            continuation_char: str = DEFAULT_CONTINUATION_CHAR) -> str:
    """
    Finds the full logical command around cursor_line.

    The block is every line chained to the cursor's line by a trailing
    continuation marker, looking both up and down, so any cursor line inside
    the block yields the same result.

    Args:
        source: The buffer to read from.
        cursor_line: Zero-based line index; clamped into the buffer.
        continuation_char: The trailing marker that chains lines.

    Returns:
        str: The joined command, or "" for an empty buffer.
    """
    line_count = source.line_count()
    if line_count == 0:
        return ""
    cursor_line = max(0, min(cursor_line, line_count - 1))

    if not continuation_char:
        return source.line_text(cursor_line).strip()

    block_end = _scan_down(source, cursor_line, continuation_char)
    block_start = _scan_up(source, cursor_line, continuation_char)
    if block_start != cursor_line:
        block_end = _scan_down(source, block_start, continuation_char)

    lines = [source.line_text(i) for i in range(block_start, block_end + 1)]
    command = join_continued_lines(lines, continuation_char)
    logger.debug(f"Extracted lines {block_start}-{block_end} around cursor line {cursor_line}: '{command}'")
    return command


def extract_selection_or_lines(source: TextSource,
                               continuation_char: str = DEFAULT_CONTINUATION_CHAR) -> str:
    """
    The default extractor: an explicit selection is taken literally, otherwise
    the continuation-aware block around the cursor is used.
    """
    if source.selection_range() is not None:
        selected = source.selected_text()
        logger.debug(f"Using explicit selection verbatim: '{selected}'")
        return selected
    return extract_logical_command(source, source.cursor_line(), continuation_char)
