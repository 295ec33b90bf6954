"""Small interactive prompts for the terminal."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence

Validator = Callable[[str], object]


def _complain(message: str) -> None:
    print(message, file=sys.stderr)


def confirm(prompt: str, default: bool | None = None) -> bool:
    """Ask a yes/no question; an empty answer takes ``default`` when one is given."""
    hint = {True: "[Y/n]", False: "[y/N]", None: "[y/n]"}[default]
    while True:
        answer = input(f"{prompt} {hint} ").strip().lower()
        if not answer and default is not None:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        _complain("Please answer 'y' or 'n'.")


def ask_text(
    prompt: str,
    validate: Validator | None = None,
    default: str | None = None,
    allow_empty: bool = False,
) -> str:
    """Ask for a line of text until it passes ``validate``.

    ``validate`` signals a rejected value by raising ``ValueError``; its
    message is shown and the question is asked again. An empty answer takes
    ``default`` when one is given, and is otherwise accepted only if
    ``allow_empty`` is set.
    """
    shown = f"{prompt} [{default}]: " if default is not None else f"{prompt}: "
    while True:
        value = input(shown)
        if not value:
            if default is not None:
                value = default
            elif allow_empty:
                return value
            else:
                continue
        if validate is not None:
            try:
                validate(value)
            except ValueError as exc:
                _complain(str(exc))
                continue
        return value


def select(prompt: str, items: Sequence[str], default: int = 0) -> int:
    """Let the user choose one of ``items``; return the chosen index."""
    if not items:
        raise ValueError("select() needs at least one item")
    if not 0 <= default < len(items):
        raise ValueError(f"default index {default} is out of range")

    print(prompt)
    for number, item in enumerate(items, start=1):
        marker = ">" if number - 1 == default else " "
        print(f"{marker} {number}) {item}")

    while True:
        answer = input(f"Choice [{default + 1}]: ").strip()
        if not answer:
            return default
        if answer.isdigit() and 1 <= int(answer) <= len(items):
            return int(answer) - 1
        _complain(f"Please enter a number between 1 and {len(items)}.")