"""Confirmation providers for the production write gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import click


class ConfirmationProvider(Protocol):
    """Answers one yes/no question."""

    def ask(self, prompt: str) -> bool: ...


@dataclass
class FlagConfirmation:
    """Non-interactive answer taken from a pre-supplied flag (--confirm)."""

    confirmed: bool = False

    def ask(self, prompt: str) -> bool:
        return self.confirmed


class PromptConfirmation:
    """Interactive terminal prompt; anything but yes declines."""

    def ask(self, prompt: str) -> bool:
        return click.confirm(prompt, default=False)
