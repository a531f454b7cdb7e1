"""
Interactive confirmation policies — a console prompt and a Textual dialog.

Both show the preview diff before asking.  Approximate (line-range)
locations get a warning and a stronger confirmation than exact matches.
"""

from __future__ import annotations

from .cli_display import log
from .diff_display import format_colored_diff, format_rich_diff
from .editing.single_applier import ConfirmationPolicy, ConfirmationRequest

_APPROXIMATE_ANSWER = "approximate"


def _header(request: ConfirmationRequest) -> str:
    p = request.proposal
    return (f"[{p.severity.value.upper()}] [{p.category.value}] "
            f"Lines {p.line_start}-{p.line_end}: {p.description}")


def _approximate_warning(request: ConfirmationRequest) -> str:
    p = request.proposal
    warning = (f"Could not find an exact match for the original code. "
               f"This fix would replace lines {p.line_start}-{p.line_end}, "
               f"an approximate location.")
    if request.clamped:
        warning += " The line range was outside the document and was clamped."
    return warning


class ConsoleConfirmationPolicy(ConfirmationPolicy):
    """Ask on stdin.  Exact matches take ``y``; approximate ones require
    typing ``approximate``."""

    def __init__(self, input_func=input) -> None:
        self._input = input_func

    def confirm(self, request: ConfirmationRequest) -> bool:
        print("\n" + "=" * 60)
        print(f"  {_header(request)}")
        print("=" * 60)
        if request.preview:
            print(format_colored_diff(request.preview))

        if request.is_approximate:
            print(f"\n  \033[33mWARNING: {_approximate_warning(request)}\033[0m")
            prompt = f"  Type '{_APPROXIMATE_ANSWER}' to apply anyway, Enter to skip: "
        else:
            prompt = "  Apply this fix? [y/N]: "

        try:
            answer = self._input(prompt).strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False

        if request.is_approximate:
            return answer == _APPROXIMATE_ANSWER
        return answer in ("y", "yes")


class TextualConfirmationPolicy(ConfirmationPolicy):
    """Show each request in a Textual dialog with Apply / Skip buttons."""

    def confirm(self, request: ConfirmationRequest) -> bool:
        try:
            return _textual_confirm(request)
        except Exception as e:
            log.warning(f"Textual confirmation dialog failed: {e}")
            return ConsoleConfirmationPolicy().confirm(request)


def _textual_confirm(request: ConfirmationRequest) -> bool:
    """Launch a Textual app to display one pending fix and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    approximate = request.is_approximate

    class FixConfirmApp(App):
        """Preview one fix, then apply or skip it."""

        CSS = """
        Screen {
            background: $surface;
        }
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #warning {
            color: #e9c46a;
            text-style: bold;
            margin: 1 2 0 2;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
            padding: 0 2;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        # Approximate edits can only be applied with the button
        BINDINGS = [
            Binding("escape", "skip", "Skip"),
            Binding("s", "skip", "Skip"),
        ] + ([] if approximate else [Binding("a", "apply", "Apply")])

        def __init__(self) -> None:
            super().__init__()
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" ━━  {_header(request)}  ━━ ", id="title-bar")
            if approximate:
                yield Static(f"⚠ {_approximate_warning(request)}", id="warning")
            with VerticalScroll(id="diff-scroll"):
                yield Static(format_rich_diff(request.preview or "(no change)"))
            with Horizontal(id="action-buttons"):
                yield Button(
                    "Apply at approximate location" if approximate else "✔ Apply",
                    id="apply-btn",
                    variant="warning" if approximate else "success",
                )
                yield Button("✕ Skip", id="skip-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.approved = event.button.id == "apply-btn"
            self.exit()

        def action_apply(self) -> None:
            self.approved = True
            self.exit()

        def action_skip(self) -> None:
            self.approved = False
            self.exit()

    app = FixConfirmApp()
    app.run()
    return app.approved
