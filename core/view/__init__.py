"""Paste view state machine."""

from core.view.controller import UnsupportedLanguageError, ViewController, ViewStateError

__all__: list[str] = ["UnsupportedLanguageError", "ViewController", "ViewStateError"]
