"""Single-select prompt rendered inline with Textual."""

from __future__ import annotations

from typing import Protocol

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Label, OptionList

from ssmhop.constants import PROMPT_PAGE_SIZE


class SelectPrompt(Protocol):
    """Protocol for single-choice prompts."""

    def select(self, message: str, options: list[str]) -> str | None:
        """Ask the user to pick one option.

        Returns
        -------
        str | None
            The chosen option, or None if the user aborted
        """
        ...


class SelectApp(App[str]):
    """Inline application presenting a list of options.

    Parameters
    ----------
    message : str
        Question shown above the list
    options : list[str]
        Options in display order
    page_size : int
        Number of visible rows

    Returns
    -------
    str
        The selected option, or None when dismissed with Escape/Ctrl+C
    """

    CSS = """
    Screen {
        height: auto;
    }

    #prompt-message {
        text-style: bold;
        color: $success;
        padding: 0 1;
    }

    #prompt-options {
        border: none;
    }
    """

    BINDINGS = [
        Binding("escape", "abort", "Cancel"),
        Binding("ctrl+c", "abort", "Cancel", priority=True),
    ]

    def __init__(
        self, message: str, options: list[str], page_size: int = PROMPT_PAGE_SIZE
    ) -> None:
        super().__init__()
        self.message = message
        self.options = list(options)
        self.page_size = page_size

    def compose(self) -> ComposeResult:
        """Compose the prompt layout."""
        yield Label(self.message, id="prompt-message")
        option_list = OptionList(*self.options, id="prompt-options")
        option_list.styles.max_height = self.page_size
        yield option_list

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Exit with the highlighted option.

        Parameters
        ----------
        event : OptionList.OptionSelected
            Selection event
        """
        self.exit(self.options[event.option_index])

    def action_abort(self) -> None:
        """Exit without a selection."""
        self.exit(None)


class TextualSelectPrompt:
    """SelectPrompt backed by an inline Textual application."""

    def __init__(self, page_size: int = PROMPT_PAGE_SIZE) -> None:
        self.page_size = page_size

    def select(self, message: str, options: list[str]) -> str | None:
        """Run the prompt and return the chosen option.

        Parameters
        ----------
        message : str
            Question shown above the list
        options : list[str]
            Options in display order

        Returns
        -------
        str | None
            The chosen option, or None if aborted or there was nothing to show
        """
        if not options:
            return None

        app = SelectApp(message, options, page_size=self.page_size)
        return app.run(inline=True)
