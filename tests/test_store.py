"""Tests for lspsample.store — DocumentStore lifecycle and events."""
from __future__ import annotations

from lsprotocol import types as lsp

from lspsample.store import DocumentStore, Event, TextDocumentWillSaveEvent

URI = 'file:///tmp/sample.txt'


def change(text: str) -> lsp.TextDocumentContentChangeWholeDocument:
    return lsp.TextDocumentContentChangeWholeDocument(text=text)


def recording_store() -> tuple[DocumentStore, list]:
    store = DocumentStore()
    seen: list = []
    store.on_did_open.subscribe(lambda e: seen.append(('open', e.document.uri, e.document.text)))
    store.on_did_change_content.subscribe(lambda e: seen.append(('change', e.document.uri, e.document.text)))
    store.on_will_save.subscribe(lambda e: seen.append(('will_save', e.document.uri, e.reason)))
    store.on_did_save.subscribe(lambda e: seen.append(('save', e.document.uri)))
    store.on_did_close.subscribe(lambda e: seen.append(('close', e.document.uri, e.document.text)))
    return store, seen


class TestEvent:
    def test_listeners_run_in_registration_order(self):
        event: Event[int] = Event()
        calls = []
        event.subscribe(lambda v: calls.append(('a', v)))
        event.subscribe(lambda v: calls.append(('b', v)))
        event.fire(7)
        assert calls == [('a', 7), ('b', 7)]

    def test_no_listeners_is_a_no_op(self):
        Event().fire(None)

    def test_subscribe_as_decorator_and_unsubscribe(self):
        event: Event[str] = Event()
        calls = []

        @event.subscribe
        def listener(value):
            calls.append(value)

        event.fire('x')
        event.unsubscribe(listener)
        event.fire('y')
        assert calls == ['x']


class TestDocumentStore:
    def test_open_fires_open_then_change(self):
        store, seen = recording_store()
        doc = store.did_open(URI, 'plaintext', 1, 'hello')
        assert seen == [('open', URI, 'hello'), ('change', URI, 'hello')]
        assert store.get(URI) is doc
        assert URI in store

    def test_change_applies_last_entry_only(self):
        store, seen = recording_store()
        store.did_open(URI, 'plaintext', 1, 'v1')
        seen.clear()
        store.did_change(URI, 4, [change('v2'), change('v3'), change('v4')])
        doc = store.get(URI)
        assert doc.text == 'v4'
        assert doc.version == 4
        assert seen == [('change', URI, 'v4')]

    def test_change_for_unknown_uri_is_ignored(self):
        store, seen = recording_store()
        store.did_change(URI, 2, [change('late')])
        assert seen == []
        assert URI not in store

    def test_change_with_no_entries_is_ignored(self):
        store, seen = recording_store()
        store.did_open(URI, 'plaintext', 1, 'same')
        seen.clear()
        store.did_change(URI, 2, [])
        assert seen == []
        assert store.get(URI).version == 1

    def test_open_close_leaves_no_trace(self):
        store, seen = recording_store()
        store.did_open('file:///other.txt', 'plaintext', 1, 'x')
        before = store.keys()
        store.did_open(URI, 'plaintext', 1, 'hello')
        store.did_close(URI)
        assert store.keys() == before
        assert len(store) == 1

    def test_close_reports_final_snapshot(self):
        store, seen = recording_store()
        store.did_open(URI, 'plaintext', 1, 'first')
        store.did_change(URI, 2, [change('final')])
        seen.clear()
        store.did_close(URI)
        assert seen == [('close', URI, 'final')]

    def test_close_unknown_uri_is_ignored(self):
        store, seen = recording_store()
        store.did_close(URI)
        assert seen == []

    def test_save_events_only_for_open_documents(self):
        store, seen = recording_store()
        store.will_save(URI, lsp.TextDocumentSaveReason.Manual)
        store.did_save(URI)
        assert seen == []
        store.did_open(URI, 'plaintext', 1, 'x')
        seen.clear()
        store.will_save(URI, lsp.TextDocumentSaveReason.AfterDelay)
        store.did_save(URI)
        assert seen == [
            ('will_save', URI, lsp.TextDocumentSaveReason.AfterDelay),
            ('save', URI),
        ]

    def test_will_save_wait_until_without_handler_is_empty(self):
        store = DocumentStore()
        store.did_open(URI, 'plaintext', 1, 'x')
        assert store.will_save_wait_until(URI, lsp.TextDocumentSaveReason.Manual) == []

    def test_will_save_wait_until_uses_handler(self):
        store = DocumentStore()
        store.did_open(URI, 'plaintext', 1, 'x')
        edit = lsp.TextEdit(
            range=lsp.Range(
                start=lsp.Position(line=0, character=0),
                end=lsp.Position(line=0, character=0),
            ),
            new_text='# ',
        )
        received: list[TextDocumentWillSaveEvent] = []

        def handler(event):
            received.append(event)
            return [edit]

        store.set_will_save_wait_until(handler)
        assert store.will_save_wait_until(URI, lsp.TextDocumentSaveReason.Manual) == [edit]
        assert received[0].document.uri == URI
        assert received[0].reason == lsp.TextDocumentSaveReason.Manual

    def test_will_save_wait_until_handler_returning_none(self):
        store = DocumentStore()
        store.did_open(URI, 'plaintext', 1, 'x')
        store.set_will_save_wait_until(lambda event: None)
        assert store.will_save_wait_until(URI, lsp.TextDocumentSaveReason.Manual) == []

    def test_will_save_wait_until_unknown_uri(self):
        store = DocumentStore()
        store.set_will_save_wait_until(lambda event: ['never'])
        assert store.will_save_wait_until(URI, lsp.TextDocumentSaveReason.Manual) == []

    def test_all_follows_open_order(self):
        store = DocumentStore()
        for name in ('c', 'a', 'b'):
            store.did_open(f'file:///{name}.txt', 'plaintext', 1, name)
        assert [d.text for d in store.all()] == ['c', 'a', 'b']
