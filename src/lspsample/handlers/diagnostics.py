"""Flag every all-uppercase word as an LSP warning."""
from __future__ import annotations

import re

from lsprotocol import types as lsp

from lspsample.document import TextDocument

SOURCE = 'ex'

# words of two or more capitals
_UPPERCASE_RE = re.compile(r'\b[A-Z]{2,}\b')


def get_diagnostics(
    doc: TextDocument,
    max_problems: int,
    related_information: bool = False,
) -> list[lsp.Diagnostic]:
    """Return at most *max_problems* diagnostics for *doc*, in text order.

    When *related_information* is set (the client advertised
    ``publishDiagnostics.relatedInformation``) each diagnostic carries two
    secondary entries pointing back at the same range.
    """
    diags: list[lsp.Diagnostic] = []
    for m in _UPPERCASE_RE.finditer(doc.text):
        if len(diags) >= max_problems:
            break
        rng = lsp.Range(
            start=doc.position_at(m.start()),
            end=doc.position_at(m.end()),
        )
        diag = lsp.Diagnostic(
            range=rng,
            message=f'{m.group()} is all uppercase.',
            severity=lsp.DiagnosticSeverity.Warning,
            source=SOURCE,
        )
        if related_information:
            location = lsp.Location(uri=doc.uri, range=rng)
            diag.related_information = [
                lsp.DiagnosticRelatedInformation(location=location, message='Spelling matters'),
                lsp.DiagnosticRelatedInformation(location=location, message='Particularly for names'),
            ]
        diags.append(diag)
    return diags
