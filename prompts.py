"""Interactive operator prompts.

The pipeline only talks to the Prompter protocol, so runs can be driven
from a terminal (ConsolePrompter) or from a script in tests.
"""

from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt


class Prompter(Protocol):
    """Source of operator answers."""

    def ask(self, question: str, default: str | None = None) -> str:
        """Return a free-text answer (default if left empty)."""
        ...

    def confirm(self, question: str, default: bool = False) -> bool:
        """Return a yes/no answer."""
        ...


class ConsolePrompter:
    """Prompter backed by rich prompts on the controlling terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask(self, question: str, default: str | None = None) -> str:
        if default is None:
            answer = Prompt.ask(question, console=self.console, default="", show_default=False)
        else:
            answer = Prompt.ask(question, console=self.console, default=default)
        return (answer or "").strip()

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(question, console=self.console, default=default)
