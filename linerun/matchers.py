# linerun/matchers.py

import re
from typing import Optional

# Returned by the matchers when the pattern does not match at the start of the text.
NO_MATCH = None

FILE_PREFIX = r"^@\s+"
MIME_PREFIX = r"^~\s+"
TERMINAL_PREFIX = r"^\$\s+"
URL_PREFIX = r"^http[s]?://\S+"


def strip_prefix(text: str, pattern: str) -> Optional[str]:
    """Returns what follows a start-anchored match of pattern, stripped, or NO_MATCH."""
    match = re.match(pattern, text)
    if match is None:
        return NO_MATCH
    return text[match.end():].strip()


def match_prefix(text: str, pattern: str) -> Optional[str]:
    """Returns the start-anchored match of pattern itself, or NO_MATCH."""
    match = re.match(pattern, text)
    if match is None:
        return NO_MATCH
    return match.group(0)
