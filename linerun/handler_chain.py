# --- API DOCUMENTATION for linerun/handler_chain.py ---
#
# **Purpose:** Runs the ordered list of (extract, act) handlers for one
# "run current selection or line" trigger, stopping at the first handler
# whose action reports success.
#
# **Public Classes:**
#
# class Handler:
#     """A named (extract, act) pair. `extract()` returns the command text;
#     `act(text)` returns True when it handled the text."""
#
# class ExtractorCache:
#     """Per-dispatch memo of extractor results; unhashable extractors are matched by identity."""
#
# **Public Functions:**
#
# def dispatch(handlers) -> Handler | None:
#     """
#     Tries each handler in order and returns the one that succeeded, or None.
#     An extractor shared by several handlers is called at most once.
#     """
#
# def default_handlers(actions, extractor) -> list[Handler]:
#     """The six built-in handlers, in their default priority order."""
#
# def build_handlers(names, actions, extractor) -> list[Handler]:
#     """Builds handlers from a configured list of names; unknown names are skipped."""
#
# **Key Global Constants/Variables:**
# - DEFAULT_HANDLER_ORDER: the built-in handler names in priority order.
# - HANDLER_FACTORIES: maps a handler name to a function building its act callable.
#
# --- END API DOCUMENTATION ---

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from linerun.actions import ActionRunner
from linerun.matchers import (
    NO_MATCH, FILE_PREFIX, MIME_PREFIX, TERMINAL_PREFIX, URL_PREFIX,
    strip_prefix, match_prefix,
)

logger = logging.getLogger(__name__)

Extractor = Callable[[], str]
Action = Callable[[str], bool]


@dataclass(frozen=True)
class Handler:
    name: str
    extract: Extractor
    act: Action


class ExtractorCache:
    """Remembers what each extractor returned during a single dispatch."""

    def __init__(self):
        # Keyed by the callable itself; equal bound methods share an entry.
        self._results: Dict[Extractor, str] = {}
        # Unhashable callables are matched by identity instead.
        self._unhashable: List[Tuple[Extractor, str]] = []

    def get(self, extractor: Extractor) -> str:
        try:
            hash(extractor)
        except TypeError:
            return self._get_unhashable(extractor)
        if extractor in self._results:
            logger.debug(f"Extractor cache hit for {extractor!r}")
            return self._results[extractor]
        text = extractor()
        self._results[extractor] = text
        return text

    def _get_unhashable(self, extractor: Extractor) -> str:
        for seen, text in self._unhashable:
            if seen is extractor:
                logger.debug(f"Extractor cache hit for {extractor!r}")
                return text
        text = extractor()
        self._unhashable.append((extractor, text))
        return text


def dispatch(handlers: Iterable[Handler]) -> Optional[Handler]:
    cache = ExtractorCache()
    for handler in handlers:
        text = cache.get(handler.extract)
        if handler.act(text):
            logger.info(f"Handler '{handler.name}' handled '{text}'")
            return handler
        logger.debug(f"Handler '{handler.name}' passed on '{text}'")
    logger.info("No handler accepted the command.")
    return None


def _stripped(pattern: str, action: Action) -> Action:
    def act(text: str) -> bool:
        payload = strip_prefix(text, pattern)
        if payload is NO_MATCH:
            return False
        return action(payload)
    return act


def _matched(pattern: str, action: Action) -> Action:
    def act(text: str) -> bool:
        payload = match_prefix(text, pattern)
        if payload is NO_MATCH:
            return False
        return action(payload)
    return act


def _directory(actions: ActionRunner) -> Action:
    def act(text: str) -> bool:
        if not actions.is_directory(text):
            return False
        return actions.open_terminal_in_directory(text)
    return act


HANDLER_FACTORIES: Dict[str, Callable[[ActionRunner], Action]] = {
    "file": lambda actions: _stripped(FILE_PREFIX, actions.open_file),
    "mime": lambda actions: _stripped(MIME_PREFIX, actions.open_with_default),
    "terminal": lambda actions: _stripped(TERMINAL_PREFIX, actions.run_in_terminal),
    "url": lambda actions: _matched(URL_PREFIX, actions.open_url),
    "directory": _directory,
    "shell": lambda actions: actions.run_silently,
}

DEFAULT_HANDLER_ORDER = ["file", "mime", "terminal", "url", "directory", "shell"]


def build_handlers(names: Iterable[str], actions: ActionRunner, extractor: Extractor) -> List[Handler]:
    handlers = []
    for name in names:
        factory = HANDLER_FACTORIES.get(name)
        if factory is None:
            logger.warning(f"Unknown handler '{name}' in configuration; skipping it.")
            continue
        handlers.append(Handler(name, extractor, factory(actions)))
    return handlers


def default_handlers(actions: ActionRunner, extractor: Extractor) -> List[Handler]:
    return build_handlers(DEFAULT_HANDLER_ORDER, actions, extractor)
