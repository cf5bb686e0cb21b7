"""
Completion handler.

The catalog is fixed: two plain-text items whose ``data`` field is an opaque
id.  ``completionItem/resolve`` uses that id to fill in ``detail`` and
``documentation`` for the item the user highlighted.
"""
from __future__ import annotations

from lsprotocol import types as lsp

# data id -> (label, detail, documentation)
_CATALOG = {
    1: ('TypeScript', 'TypeScript details', 'TypeScript documentation'),
    2: ('JavaScript', 'JavaScript details', 'JavaScript documentation'),
}


def get_completions() -> list[lsp.CompletionItem]:
    return [
        lsp.CompletionItem(label=label, kind=lsp.CompletionItemKind.Text, data=data)
        for data, (label, _, _) in _CATALOG.items()
    ]


def resolve_completion(item: lsp.CompletionItem) -> lsp.CompletionItem:
    """Enrich *item* in place; unknown ids are returned untouched."""
    entry = _CATALOG.get(item.data) if isinstance(item.data, int) else None
    if entry is not None:
        _, item.detail, item.documentation = entry
    return item
