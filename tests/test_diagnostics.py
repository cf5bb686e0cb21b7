"""Tests for lspsample.handlers.diagnostics — the uppercase-word rule."""
from __future__ import annotations

from lsprotocol import types as lsp

from lspsample.document import TextDocument

URI = 'file:///tmp/sample.txt'


def make_doc(text: str) -> TextDocument:
    return TextDocument(URI, 'plaintext', 1, text)


class TestGetDiagnostics:
    def test_hello_world_example(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        doc = make_doc('Hello WORLD and NASA')
        diags = get_diagnostics(doc, 1000)
        assert [d.message for d in diags] == ['WORLD is all uppercase.', 'NASA is all uppercase.']
        assert [(doc.offset_at(d.range.start), doc.offset_at(d.range.end)) for d in diags] == [
            (6, 11), (16, 20),
        ]
        assert all(d.severity == lsp.DiagnosticSeverity.Warning for d in diags)
        assert all(d.source == 'ex' for d in diags)
        assert all(d.related_information is None for d in diags)

    def test_cap_keeps_first_occurrences(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        diags = get_diagnostics(make_doc('AB then CD then EF'), 2)
        assert [d.message.split()[0] for d in diags] == ['AB', 'CD']

    def test_zero_cap(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        assert get_diagnostics(make_doc('AB CD'), 0) == []

    def test_ignores_single_letters_and_mixed_case(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        assert get_diagnostics(make_doc('A Word iPHONE ABc'), 1000) == []

    def test_positions_on_later_lines(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        diags = get_diagnostics(make_doc('first\r\nsecond LINE'), 1000)
        assert len(diags) == 1
        assert diags[0].range.start == lsp.Position(line=1, character=7)
        assert diags[0].range.end == lsp.Position(line=1, character=11)

    def test_related_information(self):
        from lspsample.handlers.diagnostics import get_diagnostics
        diags = get_diagnostics(make_doc('say HI'), 1000, related_information=True)
        related = diags[0].related_information
        assert [r.message for r in related] == ['Spelling matters', 'Particularly for names']
        assert all(r.location.uri == URI for r in related)
        assert all(r.location.range == diags[0].range for r in related)
