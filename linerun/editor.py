# linerun/editor.py
import functools
import logging
import os
from typing import Optional

from prompt_toolkit import Application
from prompt_toolkit.document import Document
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Window, Layout
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import TextArea

from linerun.actions import ActionRunner, working_directory_for
from linerun.config_handler import DispatchConfig, config_for_document
from linerun.extractor import extract_selection_or_lines
from linerun.handler_chain import DEFAULT_HANDLER_ORDER, build_handlers, dispatch
from linerun.text_source import DocumentTextSource

logger = logging.getLogger(__name__)

DEFAULT_KEYBINDINGS = {
    "run_line": "c-r",
    "save": "c-s",
    "quit": "c-q",
}


class EditorUI:
    """A small full-screen `prompt_toolkit` editor with a "run current selection or line" key.

    The buffer, cursor and selection are read when the key is pressed; the
    handler chain decides what to do with the text under the cursor.
    """
    def __init__(self, config: dict, document_path: Optional[str] = None):
        """
        Args:
            config: The merged application configuration.
            document_path: File to open at startup, if any.
        """
        self.config = config
        self.document_path: Optional[str] = None
        # Text as last loaded from or written to document_path.
        self._saved_text = ""
        self.app = None
        self.layout = None
        self.style = None

        self.status_bar_control = FormattedTextControl("")
        self.status_bar_style = 'class:status-bar'
        self._status_serial = 0
        self.text_area = TextArea(
            multiline=True,
            scrollbar=True,
            wrap_lines=False,
            line_numbers=config.get('ui', {}).get('show_line_numbers', True),
            style='class:editor',
        )

        self.kb = KeyBindings()
        self._register_keybindings()

        if document_path:
            self.open_file(document_path)
        logger.debug("EditorUI initialized with config and keybindings.")

    def _keys_for(self, action: str):
        configured = self.config.get('keybindings', {}).get(action, DEFAULT_KEYBINDINGS[action])
        return configured.split()

    def _register_keybindings(self):
        @self.kb.add(*self._keys_for('run_line'))
        def _handle_run_line(event):
            self.run_current_selection_or_line()

        @self.kb.add(*self._keys_for('save'))
        def _handle_save(event):
            self.save_file()

        @self.kb.add(*self._keys_for('quit'))
        def _handle_quit(event):
            logger.info("Quit keybinding triggered.")
            event.app.exit()

        logger.debug("EditorUI: Keybindings registered.")

    def get_key_bindings(self) -> KeyBindings:
        return self.kb

    @property
    def is_modified(self) -> bool:
        return self.text_area.text != self._saved_text

    @property
    def working_directory(self) -> str:
        return working_directory_for(self.document_path)

    def run_current_selection_or_line(self):
        """Dispatches the current selection, or the logical line under the cursor."""
        effective_config = config_for_document(self.config, self.document_path)
        dispatch_config = DispatchConfig.from_dict(effective_config)
        buffer = self.text_area.buffer

        source = DocumentTextSource(buffer.document)
        extractor = functools.partial(extract_selection_or_lines, source, dispatch_config.continuation_char)
        actions = ActionRunner(dispatch_config, self.working_directory, open_in_editor=self.open_file)
        handlers = build_handlers(effective_config.get('handlers', DEFAULT_HANDLER_ORDER), actions, extractor)

        status_serial = self._status_serial
        handler = dispatch(handlers)
        buffer.exit_selection()
        if handler is None:
            self.update_status_bar("No handler accepted the line.", style='class:status-bar.warning')
        elif self._status_serial == status_serial:
            # Only when the action left the status bar alone.
            self.update_status_bar(f"▶ {handler.name}", style='class:status-bar.success')
        return handler

    def open_file(self, path: str) -> bool:
        """Loads path into the buffer. A file that does not exist yet opens empty.

        Unsaved edits are never discarded: while the buffer is modified the
        request is refused with a warning on the status bar.
        """
        path = os.path.abspath(os.path.expanduser(path))
        if self.is_modified:
            logger.warning(f"Not opening '{path}': unsaved changes in '{self.document_path}'.")
            self.update_status_bar(f"⚠️ Unsaved changes; save before opening {path}", style='class:status-bar.warning')
            return False
        text = ""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except FileNotFoundError:
            logger.info(f"'{path}' does not exist yet; opening an empty buffer.")
        except (IsADirectoryError, UnicodeDecodeError, PermissionError) as e:
            logger.error(f"Cannot open '{path}': {e}")
            self.update_status_bar(f"❌ Cannot open {path}: {e}", style='class:status-bar.error')
            return False

        self.document_path = path
        self.text_area.buffer.document = Document(text, cursor_position=0)
        self._saved_text = text
        self.update_status_bar(f"📄 {path}")
        logger.info(f"Opened '{path}' ({len(text)} chars).")
        return True

    def save_file(self) -> bool:
        if not self.document_path:
            self.update_status_bar("⚠️ Buffer has no file name; nothing saved.", style='class:status-bar.warning')
            return False
        text = self.text_area.text
        try:
            with open(self.document_path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Error saving '{self.document_path}': {e}", exc_info=True)
            self.update_status_bar(f"❌ Could not save {self.document_path}: {e}", style='class:status-bar.error')
            return False
        self._saved_text = text
        logger.info(f"Saved '{self.document_path}'.")
        self.update_status_bar(f"💾 Saved {self.document_path}", style='class:status-bar.success')
        return True

    def update_status_bar(self, text: str, style: str = 'class:status-bar'):
        self.status_bar_control.text = text
        self.status_bar_style = style
        self._status_serial += 1
        if self.app:
            self.app.invalidate()

    def _key_help_text(self) -> str:
        keys = {name: self.config.get('keybindings', {}).get(name, default) for name, default in DEFAULT_KEYBINDINGS.items()}
        return f"{keys['run_line']}: Run line/selection | {keys['save']}: Save | {keys['quit']}: Quit"

    def initialize_ui_elements(self) -> Layout:
        """Builds the style and the editor / status bar / key help layout."""
        logger.info("EditorUI: Initializing UI elements...")
        self.style = Style.from_dict({
            'editor': 'bg:#282c34 #abb2bf',
            'line-number': '#5c6370',
            'key-help': 'bg:#282c34 #5c6370', 'line': '#3e4451',
            'status-bar': 'bg:#21252b #abb2bf',
            'status-bar.success': 'bg:#21252b #98c379',
            'status-bar.warning': 'bg:#21252b #d19a66',
            'status-bar.error': 'bg:#21252b #e06c75',
        })
        status_bar = Window(
            content=self.status_bar_control,
            height=1,
            style=lambda: self.status_bar_style,
        )
        key_help_field = Window(
            content=FormattedTextControl(self._key_help_text()),
            height=1, style='class:key-help'
        )
        root_container = HSplit([
            self.text_area,
            Window(height=1, char='─', style='class:line'),
            status_bar,
            key_help_field,
        ])
        self.layout = Layout(root_container, focused_element=self.text_area)
        logger.info("EditorUI: UI elements fully initialized.")
        return self.layout

    def create_application(self) -> Application:
        layout = self.initialize_ui_elements()
        enable_mouse = self.config.get('ui', {}).get('enable_mouse_support', False)
        logger.info(f"Prompt Toolkit Application mouse_support will be set to: {enable_mouse}")
        self.app = Application(
            layout=layout,
            key_bindings=self.get_key_bindings(),
            style=self.style,
            full_screen=True,
            mouse_support=enable_mouse,
        )
        return self.app
