"""
CloudMemo Client - Draft Autosave State Machine
=================================================

What:  The editor's working copy of one memo (or of the clip) and the rules
       for when it is written to the server.
How:   Four explicit states plus one DebounceScheduler per draft.

State Machine:
    ┌───────┐  edit (differs)   ┌───────┐  timer / save()  ┌────────┐
    │ CLEAN │ ────────────────► │ DIRTY │ ───────────────► │ SAVING │
    └───────┘ ◄──────────────── └───────┘                  └────────┘
        ▲      edit (reverts)       ▲                         │   │
        │                           │ failure                 │   │ edit / timer /
        │        success            │                         │   │ save() mid-flight
        └───────────────────────────┼─────────────────────────┘   ▼
                                    │                    ┌────────────────┐
                                    └─────── failure ─── │ SAVING_PENDING │
                                                         └────────────────┘
                                          success, still dirty → save again now

Guarantees:
    - At most one save per draft is in flight.
    - Edits arriving mid-flight collapse into exactly one follow-up save.
    - A draft whose content equals the last acknowledged snapshot never
      autosaves.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from cloudmemo.client.errors import ApiError, UnauthorizedError
from cloudmemo.client.scheduler import DebounceScheduler
from cloudmemo.schemas.clip import ClipResponse
from cloudmemo.schemas.memo import MemoResponse

logger = logging.getLogger(__name__)


class DraftState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"
    SAVING_PENDING = "saving_pending"


Saver = Callable[["Draft", str], Awaitable[Any]]
SavedCallback = Callable[["Draft", Any], None]
ErrorCallback = Callable[["Draft", ApiError], None]


class Draft:
    """
    Generic draft. Subclasses decide what counts as saveable and how a
    canonical server record is applied.

    Args:
        content:   Initial content; also the acknowledged snapshot
        saver:     async (draft, text) → canonical record; raises ApiError
        delay:     Debounce quiet period in seconds
        on_saved:  Called after every successful save
        on_error:  Called after every failed save
    """

    def __init__(
        self,
        content: str = "",
        *,
        saver: Saver,
        delay: float,
        on_saved: Optional[SavedCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.content = content
        self.snapshot = content
        self.state = DraftState.CLEAN
        self.delay = delay
        self.closed = False
        self._pending_explicit = False
        self._saver = saver
        self._on_saved = on_saved
        self._on_error = on_error
        self._scheduler = DebounceScheduler()
        self._idle = asyncio.Event()
        self._idle.set()

    # ── Introspection ─────────────────────────────────────────────────────

    @property
    def dirty(self) -> bool:
        return self.content != self.snapshot

    @property
    def in_flight(self) -> bool:
        return self.state in (DraftState.SAVING, DraftState.SAVING_PENDING)

    @property
    def autosave_pending(self) -> bool:
        return self._scheduler.pending

    def can_save(self, explicit: bool) -> bool:
        return bool(self.content.strip())

    def apply(self, record: Any) -> None:
        """Take in the canonical record returned by a successful save."""

    # ── Transitions ───────────────────────────────────────────────────────

    def edit(self, content: str) -> None:
        self.content = content
        if self.in_flight:
            self.state = DraftState.SAVING_PENDING
            return
        if self.dirty:
            self.state = DraftState.DIRTY
            if not self.closed:
                self._scheduler.schedule(self.delay, self._autosave)
        else:
            self.state = DraftState.CLEAN
            self._scheduler.cancel()

    def reset(self, content: str) -> None:
        """Replace content and snapshot; ignored while a save is in flight."""
        if self.in_flight:
            return
        self._scheduler.cancel()
        self.content = content
        self.snapshot = content
        self.state = DraftState.CLEAN

    def close(self) -> None:
        """Stop all future autosaves. An in-flight save still completes."""
        self.closed = True
        self._scheduler.cancel()

    def reopen(self) -> None:
        """Resume autosave after close(), e.g. once the user logged in again."""
        self.closed = False
        if self.state is DraftState.DIRTY:
            self._scheduler.schedule(self.delay, self._autosave)

    async def _autosave(self) -> None:
        await self.save(explicit=False)

    async def _explicit_save(self) -> None:
        await self.save(explicit=True)

    def _schedule_follow_up(self, delay: float, explicit: bool) -> None:
        self._scheduler.schedule(delay, self._explicit_save if explicit else self._autosave)

    async def save(self, explicit: bool = True) -> bool:
        """
        Send the current content.

        A save requested while another is in flight is folded into one
        follow-up; the follow-up is explicit if any folded request was.

        Returns:
            True when this call completed a save; False when it was skipped,
            folded into the in-flight save, or failed (see on_error).
        """
        if self.in_flight:
            self.state = DraftState.SAVING_PENDING
            self._pending_explicit = self._pending_explicit or explicit
            return False
        if not explicit and not self.dirty:
            return False
        if not self.can_save(explicit):
            return False

        self._scheduler.cancel()
        text = self.content
        self.state = DraftState.SAVING
        self._idle.clear()
        try:
            record = await self._saver(self, text)
        except ApiError as exc:
            edited_mid_flight = self.state is DraftState.SAVING_PENDING
            follow_up_explicit, self._pending_explicit = self._pending_explicit, False
            self.state = DraftState.DIRTY if self.dirty else DraftState.CLEAN
            self._idle.set()
            logger.info("Save failed (%s): %s", exc.code, exc.message)
            if self._on_error is not None:
                self._on_error(self, exc)
            # Unauthorized halts autosave until the user logs in again
            if (
                edited_mid_flight
                and not isinstance(exc, UnauthorizedError)
                and self.state is DraftState.DIRTY
                and not self.closed
            ):
                self._schedule_follow_up(self.delay, follow_up_explicit)
            return False

        edited_mid_flight = self.state is DraftState.SAVING_PENDING
        follow_up_explicit, self._pending_explicit = self._pending_explicit, False
        self.snapshot = text
        self.apply(record)
        self.state = DraftState.DIRTY if self.dirty else DraftState.CLEAN
        self._idle.set()
        if self._on_saved is not None:
            self._on_saved(self, record)
        if edited_mid_flight and self.dirty and not self.closed:
            self._schedule_follow_up(0, follow_up_explicit)
        return True

    async def wait_idle(self) -> None:
        """Wait until no autosave is scheduled and no save is in flight."""
        while True:
            task = self._scheduler.task
            if task is not None:
                await asyncio.wait({task})
                continue
            if not self.in_flight:
                return
            await self._idle.wait()


class MemoDraft(Draft):
    """
    Draft of one memo. `memo_id` is None until the first successful save
    creates the memo.

    An autosave of a memo without an id waits for `min_new_length`
    non-blank characters so stray keystrokes are not persisted; an explicit
    save only needs non-blank content.
    """

    def __init__(
        self,
        memo: Optional[MemoResponse] = None,
        *,
        min_new_length: int = 3,
        **kwargs: Any,
    ):
        super().__init__(memo.content if memo is not None else "", **kwargs)
        self.record = memo
        self.memo_id = memo.id if memo is not None else None
        self.min_new_length = min_new_length

    @property
    def is_new(self) -> bool:
        return self.memo_id is None

    def can_save(self, explicit: bool) -> bool:
        trimmed = self.content.strip()
        if not trimmed:
            return False
        if not explicit and self.is_new and len(trimmed) < self.min_new_length:
            return False
        return True

    def apply(self, record: MemoResponse) -> None:
        self.record = record
        self.memo_id = record.id


class ClipDraft(Draft):
    """Draft of the clip. An explicit save may clear it with empty text."""

    def __init__(self, clip: Optional[ClipResponse] = None, **kwargs: Any):
        text = clip.text if clip is not None and clip.text is not None else ""
        super().__init__(text, **kwargs)
        self.record = clip

    def can_save(self, explicit: bool) -> bool:
        return explicit or bool(self.content.strip())

    def apply(self, record: ClipResponse) -> None:
        self.record = record
