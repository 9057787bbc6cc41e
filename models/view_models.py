"""View state models.

``ViewSelection`` is the mutable selection owned by a view controller; ``ViewSnapshot`` is the
immutable picture of a view handed to listeners after every transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

__all__: list[str] = ["Pane", "TransientError", "ViewMode", "ViewSelection", "ViewSnapshot", "ViewStatus"]


class ViewStatus(StrEnum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class ViewMode(StrEnum):
    TRANSLATION = "translation"
    ORIGINAL = "original"
    SIDE_BY_SIDE = "side-by-side"


@dataclass
class ViewSelection:
    """What the view currently shows.

    Attributes:
        selected_language (str): Language code on display.
        mode (ViewMode): Display mode.
        pending (set[str]): Languages with a translation request in flight.
    """

    selected_language: str
    mode: ViewMode = ViewMode.TRANSLATION
    pending: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class TransientError:
    """A non-fatal, per-language translation failure."""

    language: str
    message: str


@dataclass(frozen=True)
class Pane:
    """One block of rendered text with its heading."""

    title: str
    language: str
    text: str


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable state of a view at one point in time.

    Attributes:
        status (ViewStatus): Loading, ready or failed.
        paste_id (str): Paste shown by the view.
        original_language (str | None): Language of the original text, None until loaded.
        selected_language (str | None): Language on display, None until loaded.
        mode (ViewMode): Display mode.
        pending (frozenset[str]): Languages being translated.
        available_languages (tuple[str, ...]): Languages with known text.
        panes (tuple[Pane, ...]): Text blocks to render for the current mode.
        error (str | None): Fatal load error, set only when status is FAILED.
        transient_error (TransientError | None): Last translation failure not yet superseded.
    """

    status: ViewStatus
    paste_id: str
    original_language: str | None = None
    selected_language: str | None = None
    mode: ViewMode = ViewMode.TRANSLATION
    pending: frozenset[str] = frozenset()
    available_languages: tuple[str, ...] = ()
    panes: tuple[Pane, ...] = ()
    error: str | None = None
    transient_error: TransientError | None = None

    @property
    def is_selector_disabled(self) -> bool:
        """The language selector is locked while any translation is in flight."""
        return bool(self.pending)

    @property
    def is_machine_translated(self) -> bool:
        return (
            self.status is ViewStatus.READY
            and self.selected_language is not None
            and self.selected_language != self.original_language
        )

    @property
    def can_compare(self) -> bool:
        """Original and side-by-side modes only make sense for a language other than the original."""
        return self.is_machine_translated
