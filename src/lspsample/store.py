"""
Document store: the set of open documents and their lifecycle events.

The store is driven by the ``textDocument/*`` synchronisation notifications.
Every mutation and the events it raises happen synchronously inside the
notification handler, so listeners always see the state the triggering
message produced.  Notifications for URIs that are not open (the editor may
race a close against an in-flight change) are dropped silently.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar

from lsprotocol import types as lsp

from lspsample.document import TextDocument

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class TextDocumentChangeEvent:
    document: TextDocument


@dataclass(frozen=True)
class TextDocumentWillSaveEvent:
    document: TextDocument
    reason: lsp.TextDocumentSaveReason


WillSaveWaitUntilHandler = Callable[[TextDocumentWillSaveEvent], Optional[list]]


class Event(Generic[T]):
    """Multicast callback list; listeners run in registration order."""

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[T], None]:
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Callable[[T], None]) -> None:
        self._listeners.remove(listener)

    def fire(self, payload: T) -> None:
        for listener in list(self._listeners):
            listener(payload)


class DocumentStore:
    """Open documents keyed by URI (iteration follows open order)."""

    def __init__(self) -> None:
        self._documents: dict[str, TextDocument] = {}
        self.on_did_open: Event[TextDocumentChangeEvent] = Event()
        self.on_did_change_content: Event[TextDocumentChangeEvent] = Event()
        self.on_will_save: Event[TextDocumentWillSaveEvent] = Event()
        self.on_did_save: Event[TextDocumentChangeEvent] = Event()
        self.on_did_close: Event[TextDocumentChangeEvent] = Event()
        self._will_save_wait_until: WillSaveWaitUntilHandler | None = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get(self, uri: str) -> TextDocument | None:
        return self._documents.get(uri)

    def all(self) -> list[TextDocument]:
        return list(self._documents.values())

    def keys(self) -> list[str]:
        return list(self._documents)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def set_will_save_wait_until(self, handler: WillSaveWaitUntilHandler | None) -> None:
        """Install (or clear, with ``None``) the will-save-wait-until handler."""
        self._will_save_wait_until = handler

    # ------------------------------------------------------------------
    # Synchronisation notifications
    # ------------------------------------------------------------------

    def did_open(self, uri: str, language_id: str, version: int, text: str) -> TextDocument:
        document = TextDocument(uri, language_id, version, text)
        self._documents[uri] = document
        event = TextDocumentChangeEvent(document)
        self.on_did_open.fire(event)
        self.on_did_change_content.fire(event)
        return document

    def did_change(self, uri: str, version: int, changes: Iterable) -> None:
        """Apply the last full-content change in *changes*.

        Each change only needs a ``text`` attribute; incremental (ranged)
        changes are not supported and are treated as full replacements.
        """
        changes = list(changes)
        if not changes:
            return
        document = self._documents.get(uri)
        if document is None:
            logger.debug('did_change: %s is not open, ignoring', uri)
            return
        document.update(changes[-1].text, version)
        self.on_did_change_content.fire(TextDocumentChangeEvent(document))

    def will_save(self, uri: str, reason: lsp.TextDocumentSaveReason) -> None:
        document = self._documents.get(uri)
        if document is None:
            logger.debug('will_save: %s is not open, ignoring', uri)
            return
        self.on_will_save.fire(TextDocumentWillSaveEvent(document, reason))

    def will_save_wait_until(self, uri: str, reason: lsp.TextDocumentSaveReason) -> list[lsp.TextEdit]:
        document = self._documents.get(uri)
        if document is None or self._will_save_wait_until is None:
            return []
        edits = self._will_save_wait_until(TextDocumentWillSaveEvent(document, reason))
        return list(edits) if edits else []

    def did_save(self, uri: str) -> None:
        document = self._documents.get(uri)
        if document is None:
            logger.debug('did_save: %s is not open, ignoring', uri)
            return
        self.on_did_save.fire(TextDocumentChangeEvent(document))

    def did_close(self, uri: str) -> None:
        document = self._documents.pop(uri, None)
        if document is None:
            logger.debug('did_close: %s is not open, ignoring', uri)
            return
        self.on_did_close.fire(TextDocumentChangeEvent(document))
