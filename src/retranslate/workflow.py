"""Single and bulk re-translation of a post's existing translations.

A :class:`RetranslateSession` belongs to one editing session of one source post.
It owns the per-language :class:`ItemState` map and the :class:`BulkProgress` of
the running bulk pass; nothing else writes either of them.

Only one operation runs at a time. A single-slot guard is taken before the
first state change and released when the operation finishes, whatever the
outcome. Bulk passes call the remote endpoint strictly one language after the
other and pause ``pacing_seconds`` between calls, since the translation service
behind the endpoint rate limits requests.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Protocol, Sequence

import requests

from .errors import OperationInProgress, RetranslateError
from .notices import ERROR, INFO, SUCCESS, Notice, Notifier
from .slots import EditorSnapshot, TranslationSlot, snapshot_slots
from .wordpress import RetranslateResult


log = logging.getLogger("retranslate.workflow")

DEFAULT_PACING_SECONDS = 2.0

CONFIRM_SINGLE = (
    "Re-translate this translation? This will overwrite the current translation content."
)
CONFIRM_ALL = (
    "Re-translate all {count} translations? This will overwrite all existing translation content."
)
UNKNOWN_ERROR = "Unknown error"


class ItemState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class BulkProgress:
    current: int
    total: int


@dataclass
class RunOutcome:
    results: dict[str, bool] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def succeeded(self) -> list[str]:
        return [slug for slug, ok in self.results.items() if ok]

    @property
    def failed(self) -> list[str]:
        return [slug for slug, ok in self.results.items() if not ok]


class RetranslateApi(Protocol):
    def retranslate(self, source_post_id: int, target_language: str) -> RetranslateResult:
        ...


def _error_message(exc: Exception) -> str:
    message = exc.message if isinstance(exc, RetranslateError) else str(exc)
    return message or UNKNOWN_ERROR


class RetranslateSession:
    def __init__(
        self,
        api: RetranslateApi,
        snapshot: EditorSnapshot,
        notifier: Notifier,
        confirm: Callable[[str], bool] | None = None,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        sleep: Callable[[float], object] = time.sleep,
        on_change: Callable[["RetranslateSession"], None] | None = None,
        record: Callable[[str, str, str | None], None] | None = None,
    ) -> None:
        self.api = api
        self.snapshot = snapshot
        self.notifier = notifier
        self.pacing_seconds = pacing_seconds
        self.progress: BulkProgress | None = None
        self._confirm = confirm
        self._sleep = sleep
        self._on_change = on_change
        self._record = record
        self._states: dict[str, ItemState] = {}
        self._guard = threading.Lock()

    @property
    def states(self) -> dict[str, ItemState]:
        return dict(self._states)

    def state(self, slug: str) -> ItemState:
        return self._states.get(slug, ItemState.IDLE)

    def slots(self) -> list[TranslationSlot]:
        return snapshot_slots(self.snapshot)

    @property
    def any_loading(self) -> bool:
        return any(state is ItemState.LOADING for state in self._states.values())

    @property
    def busy(self) -> bool:
        return self._guard.locked() or self.progress is not None or self.any_loading

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    def _set_state(self, slug: str, state: ItemState) -> None:
        self._states = {**self._states, slug: state}
        self._changed()

    def _set_progress(self, progress: BulkProgress | None) -> None:
        self.progress = progress
        self._changed()

    def _ensure_idle(self) -> None:
        if self.busy:
            raise OperationInProgress("a re-translation is already running")

    @contextmanager
    def _active_operation(self) -> Iterator[None]:
        self._ensure_idle()
        if not self._guard.acquire(blocking=False):
            raise OperationInProgress("a re-translation is already running")
        try:
            yield
        finally:
            self._guard.release()

    def _confirmed(self, message: str) -> bool:
        if self._confirm is None:
            return True
        return bool(self._confirm(message))

    def _run_item(self, slug: str) -> bool:
        self._set_state(slug, ItemState.LOADING)
        log.debug("re-translation started: post #%s -> %s", self.snapshot.post_id, slug)
        try:
            result = self.api.retranslate(self.snapshot.post_id, slug)
        except (RetranslateError, requests.RequestException) as exc:
            message = _error_message(exc)
            self._set_state(slug, ItemState.ERROR)
            log.debug(
                "re-translation failed: post #%s -> %s, error: %s",
                self.snapshot.post_id,
                slug,
                message,
            )
            self.notifier.notify(Notice(ERROR, f"Translation failed: {message}"))
            if self._record is not None:
                self._record(slug, "error", message)
            return False
        except Exception:
            self._set_state(slug, ItemState.ERROR)
            raise

        self._set_state(slug, ItemState.SUCCESS)
        log.debug(
            "re-translation completed: post #%s -> %s (post #%s)",
            self.snapshot.post_id,
            slug,
            result.post_id,
        )
        self.notifier.notify(Notice(SUCCESS, f"Translation updated: {result.post_title}"))
        if self._record is not None:
            self._record(slug, "ok", None)
        return True

    def invoke(self, slug: str) -> bool:
        """Re-translate one language without asking for confirmation."""
        with self._active_operation():
            return self._run_item(slug)

    def invoke_all(
        self,
        slots: Sequence[TranslationSlot] | None = None,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        """Re-translate every slot in order, continuing past failed items.

        ``cancel`` is checked before each item and before each pause; once set,
        the pass stops and no completion notice is emitted.
        """
        with self._active_operation():
            targets = list(self.slots() if slots is None else slots)
            outcome = RunOutcome()
            total = len(targets)
            if not total:
                return outcome
            try:
                for index, slot in enumerate(targets):
                    if cancel is not None and cancel.is_set():
                        outcome.cancelled = True
                        break
                    self._set_progress(BulkProgress(current=index + 1, total=total))
                    outcome.results[slot.slug] = self._run_item(slot.slug)
                    if index == total - 1:
                        break
                    if cancel is not None and cancel.is_set():
                        outcome.cancelled = True
                        break
                    self._sleep(self.pacing_seconds)
            finally:
                self._set_progress(None)

            if outcome.cancelled:
                log.info("bulk re-translation cancelled after %s of %s", len(outcome.results), total)
                self.notifier.notify(
                    Notice(
                        INFO,
                        f"Re-translation cancelled after {len(outcome.results)} of {total} translations.",
                    )
                )
            else:
                self.notifier.notify(Notice(SUCCESS, "All translations updated!"))
            return outcome

    def retranslate(self, slug: str) -> bool | None:
        """Confirm, then re-translate one language. Returns None when declined."""
        self._ensure_idle()
        if not self._confirmed(CONFIRM_SINGLE):
            return None
        return self.invoke(slug)

    def confirm_all(self) -> bool:
        """Ask to overwrite every slot; refuses while another operation runs."""
        self._ensure_idle()
        return self._confirmed(CONFIRM_ALL.format(count=len(self.slots())))

    def retranslate_all(self, cancel: threading.Event | None = None) -> RunOutcome | None:
        """Confirm, then re-translate all slots. Returns None when declined."""
        if not self.confirm_all():
            return None
        return self.invoke_all(cancel=cancel)
