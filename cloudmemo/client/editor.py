"""
CloudMemo Client - Memo Editor
================================

What:  The editor session: the memo list, the selected memo's draft, the clip
       draft and the status line shown to the user.
How:   Owns one MemoDraft at a time plus one ClipDraft; wires their savers to
       ApiClient and reconciles canonical records into the working set.

Error policy:
    unauthorized  → session cleared, auth_required set, autosave stops
    anything else → status message; the draft keeps its content and stays
                    dirty so nothing typed is lost
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from cloudmemo.client.api import ApiClient
from cloudmemo.client.config import client_settings
from cloudmemo.client.draft import ClipDraft, Draft, MemoDraft
from cloudmemo.client.errors import (
    ApiError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
)
from cloudmemo.schemas.clip import ClipResponse
from cloudmemo.schemas.memo import MemoResponse

logger = logging.getLogger(__name__)

Confirm = Callable[[], Union[bool, Awaitable[bool]]]

STATUS_MESSAGES = {
    "unauthorized": "Session expired. Please log in again.",
    "invalid_credentials": "Invalid password.",
    "invalid_payload": "The server rejected the request.",
    "not_found": "That memo no longer exists.",
    "request_failed": "Request failed. Please try again.",
    "timeout": "The server did not answer in time. Please try again.",
    "unreachable": "Could not reach the server. Check your connection.",
}


def _sort_key(memo: MemoResponse):
    return (memo.updated_at, memo.id)


class MemoEditor:
    """
    Client-side editor state.

    Attributes:
        memos:          Working set, most recently updated first
        draft:          The selected memo's draft (memo_id None for a new memo)
        clip:           The clip draft, independent of memo selection
        status:         Last user-facing status message, or None
        auth_required:  True until a successful login; set again on any 401
    """

    def __init__(
        self,
        api: ApiClient,
        autosave_delay: Optional[float] = None,
        min_new_memo_length: Optional[int] = None,
    ):
        self.api = api
        self.autosave_delay = (
            autosave_delay if autosave_delay is not None
            else client_settings.autosave_delay_seconds
        )
        self.min_new_memo_length = (
            min_new_memo_length if min_new_memo_length is not None
            else client_settings.min_new_memo_length
        )
        self.memos: List[MemoResponse] = []
        self.status: Optional[str] = None
        self.auth_required = not api.session.is_authenticated
        self.draft = self._memo_draft()
        self.clip = ClipDraft(
            saver=self._send_clip,
            delay=self.autosave_delay,
            on_saved=self._clip_saved,
            on_error=self._draft_failed,
        )

    # ── Draft wiring ──────────────────────────────────────────────────────

    def _memo_draft(self, memo: Optional[MemoResponse] = None) -> MemoDraft:
        return MemoDraft(
            memo,
            min_new_length=self.min_new_memo_length,
            saver=self._send_memo,
            delay=self.autosave_delay,
            on_saved=self._memo_saved,
            on_error=self._draft_failed,
        )

    def _replace_draft(self, memo: Optional[MemoResponse] = None) -> MemoDraft:
        # The old draft may still be in flight; its result only reaches
        # the working set through _memo_saved.
        self.draft.close()
        self.draft = self._memo_draft(memo)
        return self.draft

    async def _send_memo(self, draft: MemoDraft, text: str) -> MemoResponse:
        if draft.memo_id is None:
            return await self.api.create_memo(text)
        return await self.api.update_memo(draft.memo_id, text)

    async def _send_clip(self, draft: ClipDraft, text: str) -> ClipResponse:
        return await self.api.save_clip(text)

    def _memo_saved(self, draft: Draft, record: MemoResponse) -> None:
        self._upsert(record)
        self.status = "Saved"

    def _clip_saved(self, draft: Draft, record: ClipResponse) -> None:
        self.status = "Clip saved"

    def _draft_failed(self, draft: Draft, exc: ApiError) -> None:
        self._report(exc)

    def _report(self, exc: ApiError) -> None:
        if isinstance(exc, UnauthorizedError) and not isinstance(exc, InvalidCredentialsError):
            self.api.session.end()
            self.auth_required = True
            self.draft.close()
            self.clip.close()
        self.status = STATUS_MESSAGES.get(exc.code, exc.message)

    # ── Working set ───────────────────────────────────────────────────────

    def _upsert(self, record: MemoResponse) -> None:
        self.memos = [memo for memo in self.memos if memo.id != record.id]
        self.memos.append(record)
        self.memos.sort(key=_sort_key, reverse=True)

    def _index_of(self, memo_id: int) -> Optional[int]:
        for index, memo in enumerate(self.memos):
            if memo.id == memo_id:
                return index
        return None

    # ── Session ───────────────────────────────────────────────────────────

    async def login(self, password: str) -> bool:
        try:
            await self.api.login(password)
        except ApiError as exc:
            self._report(exc)
            return False

        self.auth_required = False
        self.status = "Logged in"
        self.draft.reopen()
        self.clip.reopen()
        await self.refresh()
        await self.load_clip()
        return not self.auth_required

    def logout(self) -> None:
        self.api.session.end()
        self.auth_required = True
        self.memos = []
        self._replace_draft()
        self.clip.close()
        self.clip.reset("")
        self.status = None

    # ── Memos ─────────────────────────────────────────────────────────────

    async def refresh(self) -> List[MemoResponse]:
        try:
            memos = await self.api.list_memos()
        except ApiError as exc:
            self._report(exc)
            return self.memos
        self.memos = sorted(memos, key=_sort_key, reverse=True)
        return self.memos

    async def select(self, memo_id: int) -> Optional[MemoDraft]:
        """
        Make `memo_id` the current draft, loading its canonical record.

        Never blocks on the current draft: unsaved edits to it are dropped and
        its pending autosave is cancelled before the fetch starts.
        """
        previous = self.draft
        previous.close()
        try:
            memo = await self.api.get_memo(memo_id)
        except NotFoundError as exc:
            self.memos = [memo for memo in self.memos if memo.id != memo_id]
            self._report(exc)
            previous.reopen()
            return None
        except UnauthorizedError as exc:
            self._report(exc)
            return None
        except ApiError as exc:
            # Offline: fall back to the copy already in the working set
            self._report(exc)
            index = self._index_of(memo_id)
            if index is None:
                previous.reopen()
                return None
            memo = self.memos[index]
        else:
            self._upsert(memo)
        return self._replace_draft(memo)

    def new_memo(self) -> MemoDraft:
        return self._replace_draft()

    def edit(self, content: str) -> None:
        self.draft.edit(content)

    async def save(self) -> bool:
        return await self.draft.save(explicit=True)

    async def delete(self, confirm: Confirm) -> bool:
        """
        Delete the selected memo after `confirm()` returns truthy.

        The memo at the same position is selected next, else the last one,
        else a fresh new-memo draft. A save still in flight is awaited first
        so a memo it creates is deleted rather than left behind. On failure
        the draft stays selected and autosave resumes.
        """
        answer = confirm()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return False

        draft = self.draft
        draft.close()
        if draft.in_flight:
            await draft.wait_idle()

        memo_id = draft.memo_id
        if memo_id is None:
            self._replace_draft()
            return True

        try:
            await self.api.delete_memo(memo_id)
        except ApiError as exc:
            self._report(exc)
            if not isinstance(exc, UnauthorizedError) and draft is self.draft:
                draft.reopen()
            return False

        index = self._index_of(memo_id)
        self.memos = [memo for memo in self.memos if memo.id != memo_id]
        self.status = "Deleted"
        if not self.memos:
            self._replace_draft()
        else:
            if index is None or index >= len(self.memos):
                index = len(self.memos) - 1
            self._replace_draft(self.memos[index])
        return True

    # ── Clip ──────────────────────────────────────────────────────────────

    async def load_clip(self) -> Optional[ClipResponse]:
        """Fetch the clip; a dirty clip draft keeps its local text."""
        try:
            clip = await self.api.get_clip()
        except ApiError as exc:
            self._report(exc)
            return None
        if not self.clip.dirty:
            self.clip.reset(clip.text or "")
            self.clip.record = clip
        return clip

    def edit_clip(self, text: str) -> None:
        self.clip.edit(text)

    async def save_clip(self) -> bool:
        return await self.clip.save(explicit=True)

    async def wait_idle(self) -> None:
        await self.draft.wait_idle()
        await self.clip.wait_idle()

