# Client package init
"""
CloudMemo Client
==================

Async counterpart of the browser editor: an httpx-based API client plus the
per-draft autosave state machine.

    MemoEditor ──► MemoDraft / ClipDraft ──► DebounceScheduler
        │                 │
        └──────► ApiClient ◄──── SessionContext ──► CredentialStore
"""
