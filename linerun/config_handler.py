# linerun/config_handler.py

import os
import sys
import json
import re
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

# --- Module-specific logger ---
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "default_config.json"
USER_CONFIG_FILENAME = "user_config.json"


@dataclass(frozen=True)
class DispatchConfig:
    """The settings the action layer needs for one dispatch."""
    open_command: str = "xdg-open"
    terminal_command: str = "xterm"
    terminal_execute_arg: str = "-e"
    continuation_char: str = "\\"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "DispatchConfig":
        defaults = cls()
        return cls(
            open_command=config.get("open_command", defaults.open_command),
            terminal_command=config.get("terminal_command", defaults.terminal_command),
            terminal_execute_arg=config.get("terminal_execute_arg", defaults.terminal_execute_arg),
            continuation_char=config.get("continuation_char", defaults.continuation_char),
        )


def load_jsonc_file(filepath: str) -> Optional[Dict[str, Any]]:
    """
    Loads a JSON file that may contain single-line (//) and multi-line (/* */) comments.

    Comment markers inside string values are left alone, so a value such as
    "https://example.com" survives the stripping.

    Args:
        filepath (str): The full path to the .jsonc or .json file.

    Returns:
        Optional[Dict[str, Any]]: A dictionary with the file's contents,
                                  or None if the file is not found or cannot be parsed.
    """
    if not os.path.exists(filepath):
        logger.info(f"Configuration file not found at: {filepath}")
        return None

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            file_content = f.read()

        # Strings are matched first and kept; only the comment alternatives are dropped.
        token_pattern = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
        content_without_comments = token_pattern.sub(lambda m: m.group(1) or '', file_content)

        return json.loads(content_without_comments)

    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON from {filepath}: {e}", exc_info=True)
        print(f"❌ Error: Could not parse the configuration file at {filepath}. Please check for syntax errors.", file=sys.stderr)
        return None
    except IOError as e:
        logger.error(f"Error reading file {filepath}: {e}", exc_info=True)
        print(f"❌ Error: Could not read the file at {filepath}.", file=sys.stderr)
        return None


def merge_configs(base, override):
    """ Helper function to recursively merge dictionaries. """
    merged = base.copy()
    for key, value in override.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_configuration(config_dir: str) -> Dict[str, Any]:
    """
    Loads the mandatory default configuration and merges the optional user file over it.

    Raises:
        FileNotFoundError: if default_config.json is missing or cannot be parsed.
    """
    default_config_path = os.path.join(config_dir, DEFAULT_CONFIG_FILENAME)
    user_config_path = os.path.join(config_dir, USER_CONFIG_FILENAME)

    base_config = load_jsonc_file(default_config_path)
    if base_config is None:
        error_msg = f"CRITICAL ERROR: Default configuration file not found or failed to parse at '{default_config_path}'. Application cannot start."
        logger.critical(error_msg)
        raise FileNotFoundError(error_msg)
    logger.info(f"Successfully loaded base configuration from {default_config_path}")

    user_settings = load_jsonc_file(user_config_path)
    if user_settings:
        logger.info(f"Loaded and merged user configurations from {user_config_path}")
        return merge_configs(base_config, user_settings)

    logger.info(f"{user_config_path} not found or is invalid. No user configuration overrides applied.")
    return base_config


def config_for_document(config: Dict[str, Any], document_path: Optional[str]) -> Dict[str, Any]:
    """
    Layers the `contexts` overrides whose directory contains the document.

    Shorter prefixes are applied first so the most specific directory wins.
    A document without a path only ever sees the global configuration.
    """
    contexts = config.get("contexts") or {}
    if not document_path or not contexts:
        return config

    document_abs = os.path.abspath(os.path.expanduser(document_path))
    matching = []
    for prefix, overrides in contexts.items():
        prefix_abs = os.path.abspath(os.path.expanduser(prefix))
        if document_abs == prefix_abs or document_abs.startswith(prefix_abs.rstrip(os.sep) + os.sep):
            matching.append((len(prefix_abs), prefix, overrides))

    effective = config
    for _, prefix, overrides in sorted(matching, key=lambda item: item[0]):
        logger.debug(f"Applying context overrides for '{prefix}' to {document_path}")
        effective = merge_configs(effective, overrides)
    return effective
