"""View controller for a single paste.

The controller is a small state machine (loading, ready, failed) sitting between a presentation layer
and the translation cache. Every successful transition produces an immutable ``ViewSnapshot`` that
is pushed to the registered listeners.
"""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, Final, TypeAlias

from core.clients.interface import PasteClientError, TranslationCancelledError
from models.config_models import DEFAULT_SUPPORTED_LANGUAGES
from models.view_models import Pane, TransientError, ViewMode, ViewSelection, ViewSnapshot, ViewStatus
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Iterable

    from core.cache.translation_cache import TranslationCache
    from models.paste_models import PasteRecord

    ViewListener: TypeAlias = Callable[[ViewSnapshot], None]


__all__: list[str] = ["UnsupportedLanguageError", "ViewController", "ViewStateError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

LOCALE_ENVIRONMENT_VARIABLES: Final[tuple[str, ...]] = ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG")


class ViewStateError(RuntimeError):
    """An operation was requested in a state that does not allow it."""


class UnsupportedLanguageError(ValueError):
    """The requested display language is not offered."""


class ViewController:
    """Drive one paste view from loading to display.

    Attributes:
        paste_id (str): Paste shown by this view.
        cache (TranslationCache): Owner of the paste record and its translations.
        supported_languages (tuple[str, ...]): Languages a user may select.
    """

    def __init__(
        self,
        paste_id: str,
        cache: TranslationCache,
        *,
        supported_languages: Iterable[str] = DEFAULT_SUPPORTED_LANGUAGES,
        preferred_language: str | None = None,
    ) -> None:
        """Initialize the controller in the loading state.

        Args:
            paste_id (str): Paste to show.
            cache (TranslationCache): Cache that will load and own the paste record.
            supported_languages (Iterable[str]): Languages a user may select.
            preferred_language (str | None): Language to show first when available. None reads the
                environment locale.
        """
        self.paste_id: str = paste_id
        self.cache: TranslationCache = cache
        self.supported_languages: tuple[str, ...] = tuple(
            dict.fromkeys(StringUtils.normalize_language_code(lang) for lang in supported_languages)
        )
        self._preferred_language: str = StringUtils.normalize_language_code(
            preferred_language if preferred_language is not None else self.environment_language()
        )
        self._status: ViewStatus = ViewStatus.LOADING
        self._selection: ViewSelection | None = None
        self._error: str | None = None
        self._transient_error: TransientError | None = None
        self._listeners: list[ViewListener] = []
        self._tasks: set[asyncio.Task[str | None]] = set()
        self._entered: bool = False
        self._closed: bool = False

    @staticmethod
    def environment_language() -> str:
        """Read the user's language from the usual locale environment variables.

        Returns:
            str: A bare language code, or an empty string if none is set.
        """
        for name in LOCALE_ENVIRONMENT_VARIABLES:
            # LANGUAGE may hold a colon separated priority list
            value: str = os.environ.get(name, "").split(":")[0]
            lang: str = StringUtils.normalize_language_code(value)
            if lang:
                return lang
        return ""

    @property
    def status(self) -> ViewStatus:
        return self._status

    @property
    def selection(self) -> ViewSelection | None:
        return self._selection

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def transient_error(self) -> TransientError | None:
        return self._transient_error

    @property
    def preferred_language(self) -> str:
        return self._preferred_language

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register a listener called with a snapshot after every transition.

        Args:
            listener (ViewListener): Callable receiving the new ``ViewSnapshot``.

        Returns:
            Callable[[], None]: Function removing the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def enter(self) -> ViewSnapshot:
        """Load the paste and pick the initial language.

        A load failure puts the view into the terminal FAILED state; it is not retried.

        Returns:
            ViewSnapshot: State after loading.

        Raises:
            ViewStateError: If the view was already entered or closed.
        """
        if self._entered or self._closed:
            msg = f"View for paste '{self.paste_id}' was already entered"
            raise ViewStateError(msg)
        self._entered = True
        self._notify()

        try:
            record: PasteRecord = await self.cache.load(self.paste_id)
        except TranslationCancelledError:
            logger.debug("Load of paste '%s' abandoned", self.paste_id)
            return self.snapshot()
        except PasteClientError as err:
            self._status = ViewStatus.FAILED
            self._error = str(err) or "Failed to load paste"
            logger.warning("View for paste '%s' failed: %s", self.paste_id, self._error)
            self._notify()
            return self.snapshot()

        if self._preferred_language in record.available_languages:
            initial: str = self._preferred_language
        else:
            initial = record.original_language
        self._selection = ViewSelection(selected_language=initial)
        self._status = ViewStatus.READY
        logger.info("View for paste '%s' ready in '%s'", self.paste_id, initial)
        self._notify()
        return self.snapshot()

    async def select_language(self, lang: str) -> str | None:
        """Show the paste in another language, translating it if needed.

        The selection changes before any I/O so the presentation reflects the new target at once.
        A translation failure is kept as a transient error and leaves the view usable.

        Args:
            lang (str): Language code to show.

        Returns:
            str | None: The text now known for ``lang``, or None if the translation failed, was
            cancelled, or the view was closed meanwhile.

        Raises:
            ViewStateError: If the view is not ready.
            UnsupportedLanguageError: If the language is not offered.
        """
        selection: ViewSelection = self._require_ready()
        lang = self._validate_language(lang)
        record: PasteRecord = self.cache.record

        selection.selected_language = lang
        if lang == record.original_language:
            selection.mode = ViewMode.TRANSLATION
        self._transient_error = None
        if not self.cache.is_cached(lang):
            selection.pending.add(lang)
        self._notify()

        try:
            text: str = await self.cache.ensure_translation(record, lang)
        except asyncio.CancelledError:
            selection.pending.discard(lang)
            self._notify()
            raise
        except TranslationCancelledError as err:
            selection.pending.discard(lang)
            if self._closed:
                logger.debug("Translation into '%s' ignored, view closed", lang)
                return None
            self._transient_error = TransientError(language=lang, message=str(err) or "Translation cancelled")
            logger.warning("Translation into '%s' was cancelled: %s", lang, self._transient_error.message)
            self._notify()
            return None
        except PasteClientError as err:
            selection.pending.discard(lang)
            self._transient_error = TransientError(language=lang, message=str(err) or "Translation failed")
            logger.warning("Translation into '%s' failed: %s", lang, self._transient_error.message)
            self._notify()
            return None

        selection.pending.discard(lang)
        self._notify()
        return text

    def request_language(self, lang: str) -> asyncio.Task[str | None]:
        """Start ``select_language`` in the background.

        The task is cancelled by ``close``.

        Args:
            lang (str): Language code to show.

        Returns:
            asyncio.Task[str | None]: Task running the selection.

        Raises:
            ViewStateError: If the view is not ready.
            UnsupportedLanguageError: If the language is not offered.
        """
        self._require_ready()
        lang = self._validate_language(lang)
        task: asyncio.Task[str | None] = asyncio.create_task(self.select_language(lang), name=f"translate-{lang}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def set_mode(self, mode: ViewMode | str) -> bool:
        """Switch the display mode. No I/O is involved.

        Original and side-by-side are ignored while the original language is selected.

        Args:
            mode (ViewMode | str): New mode.

        Returns:
            bool: True if the mode changed.

        Raises:
            ViewStateError: If the view is not ready.
            ValueError: If the mode is unknown.
        """
        selection: ViewSelection = self._require_ready()
        new_mode = ViewMode(mode)
        if new_mode is not ViewMode.TRANSLATION and selection.selected_language == self.cache.record.original_language:
            logger.debug("Mode '%s' ignored, original language selected", new_mode)
            return False
        if new_mode is selection.mode:
            return False
        selection.mode = new_mode
        self._notify()
        return True

    @property
    def display_text(self) -> str | None:
        """Text shown in translation mode: the translation if known, otherwise the original."""
        if self._status is not ViewStatus.READY or self._selection is None:
            return None
        record: PasteRecord = self.cache.record
        return record.translations.get(self._selection.selected_language, record.original_text)

    def panes(self) -> tuple[Pane, ...]:
        """Text blocks to render for the current mode."""
        if self._status is not ViewStatus.READY or self._selection is None:
            return ()
        record: PasteRecord = self.cache.record
        selected: str = self._selection.selected_language
        text: str = record.translations.get(selected, record.original_text)
        original = Pane(
            title=f"Original ({record.original_language})", language=record.original_language, text=record.original_text
        )

        match self._selection.mode:
            case ViewMode.ORIGINAL:
                return (original,)
            case ViewMode.SIDE_BY_SIDE:
                return (original, Pane(title=f"Translation ({selected})", language=selected, text=text))
            case _:
                title: str = "Original" if selected == record.original_language else "Translation"
                return (Pane(title=title, language=selected, text=text),)

    def snapshot(self) -> ViewSnapshot:
        """Build an immutable picture of the current state."""
        if self._status is not ViewStatus.READY or self._selection is None:
            return ViewSnapshot(status=self._status, paste_id=self.paste_id, error=self._error)

        record: PasteRecord = self.cache.record
        return ViewSnapshot(
            status=self._status,
            paste_id=self.paste_id,
            original_language=record.original_language,
            selected_language=self._selection.selected_language,
            mode=self._selection.mode,
            pending=frozenset(self._selection.pending) | self.cache.pending,
            available_languages=tuple(record.available_languages),
            panes=self.panes(),
            transient_error=self._transient_error,
        )

    async def close(self) -> None:
        """Leave the view: cancel background selections and discard late translation results."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        tasks: list[asyncio.Task[str | None]] = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        await self.cache.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("View for paste '%s' closed", self.paste_id)

    def _require_ready(self) -> ViewSelection:
        if self._closed:
            msg = f"View for paste '{self.paste_id}' is closed"
            raise ViewStateError(msg)
        if self._status is not ViewStatus.READY or self._selection is None:
            msg = f"View for paste '{self.paste_id}' is not ready (status: {self._status})"
            raise ViewStateError(msg)
        return self._selection

    def _validate_language(self, lang: str) -> str:
        code: str = StringUtils.normalize_language_code(lang)
        if code and code == self.cache.record.original_language:
            return code
        if not code or code not in self.supported_languages:
            msg: str = f"Unsupported language: '{lang}'"
            raise UnsupportedLanguageError(msg)
        return code

    def _notify(self) -> None:
        if self._closed or not self._listeners:
            return
        snapshot: ViewSnapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("View listener %r failed", listener)
