"""Terminal prompts for ssmhop."""

from __future__ import annotations

from ssmhop.tui.prompt import SelectApp, SelectPrompt, TextualSelectPrompt

__all__ = ["SelectApp", "SelectPrompt", "TextualSelectPrompt"]
