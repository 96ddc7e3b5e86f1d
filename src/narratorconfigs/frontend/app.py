"""Textual app for testing narrations against the current config."""

from __future__ import annotations

import dataclasses
from typing import Any, Optional

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Input, Static, Switch

from narratorconfigs.adapters.file_config_source import FileConfigurationSource, resolve_config_path
from narratorconfigs.adapters.language_file import LanguageFileDictionarySource
from narratorconfigs.core.errors import NarratorConfigsError
from narratorconfigs.core.gate import decide
from narratorconfigs.core.models import Message, Provenance
from narratorconfigs.core.patterns import build_acceptance_set
from narratorconfigs.settings import Settings

from .constants import NARRATOR_GREEN
from .state import TesterState


class NarrationTesterApp(App):
    """Shows the accepted narrations and tests candidate texts."""

    CSS = """
    Screen {
        background: #10171a;
        color: #e6eef0;
    }

    #header {
        height: 5;
        padding: 1 4;
        border-bottom: solid #2a3a3f;
    }

    #title {
        text-style: bold;
    }

    .subtle {
        color: #b9c8cc;
    }

    #patterns-table {
        height: 1fr;
    }

    #tester {
        height: auto;
        padding: 1 4;
        border-top: solid #2a3a3f;
    }

    #tester-row {
        height: 3;
    }

    #tester-text {
        width: 1fr;
    }

    #tester-result {
        height: 3;
        padding: 1 0 0 0;
    }
    """

    BINDINGS = [
        ("ctrl+r", "reload_config", "Reload"),
        ("ctrl+t", "toggle_chat", "Toggle chat"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, settings: Settings, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._settings = settings
        self.tester_state = TesterState()
        self._source: Optional[FileConfigurationSource] = None

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            yield Static(self._title_text(), id="title")
            yield Static("", id="header-status", classes="subtle")
        yield DataTable(id="patterns-table", cursor_type="row")
        with Vertical(id="tester"):
            with Horizontal(id="tester-row"):
                yield Input(placeholder="Text to narrate", id="tester-text")
                yield Static("chat", classes="subtle")
                yield Switch(value=False, id="tester-chat")
                yield Button("Test", id="tester-run", variant="primary")
            yield Static("", id="tester-result")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#patterns-table", DataTable)
        table.add_column("origin", key="origin", width=10)
        table.add_column("key", key="key", width=40)
        table.add_column("pattern", key="pattern")
        table.zebra_stripes = True
        self.action_reload_config()

    def action_reload_config(self) -> None:
        state = self.tester_state
        try:
            source = FileConfigurationSource(resolve_config_path(self._settings.config_paths))
            config = source.current()
            translations = LanguageFileDictionarySource(self._settings.language_file).snapshot()
            acceptance = build_acceptance_set(translations, config)
        except NarratorConfigsError as exc:
            # Keep showing the last good set.
            state.error = str(exc)
        else:
            self._source = source
            state.config = config
            state.acceptance = acceptance
            state.translations = len(translations)
            state.error = None
        self._refresh_table()
        self._refresh_status()

    def action_toggle_chat(self) -> None:
        """Flip chatEnabled and write it back to the config file."""

        if self._source is None:
            return
        config = self._source.current()
        try:
            self._source.save(dataclasses.replace(config, chat_enabled=not config.chat_enabled))
        except OSError as exc:
            self.tester_state.error = f"Cannot save config: {exc}"
            self._refresh_status()
            return
        self.action_reload_config()
        self.notify(f"Chat narration {'enabled' if not config.chat_enabled else 'disabled'}")

    def _refresh_table(self) -> None:
        table = self.query_one("#patterns-table", DataTable)
        table.clear()
        matchers = sorted(self.tester_state.acceptance, key=lambda m: (m.origin, m.key or "", m.source))
        for matcher in matchers:
            table.add_row(matcher.origin, matcher.key or "", matcher.source)

    def _refresh_status(self) -> None:
        state = self.tester_state
        status = self.query_one("#header-status", Static)
        if state.error:
            status.update(Text(state.error, style="bold red"))
            return
        status.update(
            f"{len(state.acceptance)} accepted narrations from {state.translations} translations"
        )

    @on(Button.Pressed, "#tester-run")
    @on(Input.Submitted, "#tester-text")
    def _on_test(self) -> None:
        state = self.tester_state
        result = self.query_one("#tester-result", Static)
        if state.config is None:
            result.update(Text("No config loaded", style="bold red"))
            return
        text = self.query_one("#tester-text", Input).value
        provenance = Provenance.CHAT if self.query_one("#tester-chat", Switch).value else Provenance.SYSTEM
        verdict = decide(
            Message(text, provenance),
            state.acceptance,
            state.config,
            playback_active=True,
            mode_is_custom=True,
        )
        if verdict is None:
            result.update(Text("Mod disabled: the host narrates this", style="yellow"))
        elif verdict.narrate:
            result.update(Text(f"NARRATE ({verdict.reason})", style=f"bold {NARRATOR_GREEN}"))
        else:
            result.update(Text(f"SILENT ({verdict.reason})", style="bold red"))

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("NARRATOR", NARRATOR_GREEN),
            (" CONFIGS > Narration Tester", "bold"),
        )
