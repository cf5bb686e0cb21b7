"""
lspsample Language Server.

Registers LSP features and routes them to the per-connection
:class:`~lspsample.store.DocumentStore` and :class:`~lspsample.session.Session`.
"""
from __future__ import annotations

import logging

from pygls.lsp.server import LanguageServer
from lsprotocol import types as lsp

from lspsample import __version__
from lspsample.session import COMPLETION_OPTIONS, Session
from lspsample.store import DocumentStore

logger = logging.getLogger(__name__)


class SampleLanguageServer(LanguageServer):
    """``LanguageServer`` carrying one document store and session per connection."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.documents = DocumentStore()
        self.session = Session(self, self.documents)


def create_server() -> SampleLanguageServer:
    ls = SampleLanguageServer(
        'lspsample', __version__,
        text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
    )
    _register_features(ls)
    return ls


def _register_features(server: SampleLanguageServer) -> None:

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    @server.feature(lsp.INITIALIZE)
    def on_initialize(ls: SampleLanguageServer, params: lsp.InitializeParams):
        ls.session.initialize(params)

    @server.feature(lsp.INITIALIZED)
    async def on_initialized(ls: SampleLanguageServer, params: lsp.InitializedParams):
        await ls.session.initialized()

    @server.feature(lsp.SHUTDOWN)
    async def on_shutdown(ls: SampleLanguageServer, params):
        await ls.session.join()

    @server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
    def did_change_configuration(ls: SampleLanguageServer, params: lsp.DidChangeConfigurationParams):
        ls.session.did_change_configuration(getattr(params, 'settings', None))

    @server.feature(lsp.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
    def did_change_workspace_folders(ls: SampleLanguageServer, params: lsp.DidChangeWorkspaceFoldersParams):
        ls.session.did_change_workspace_folders(params)

    # -----------------------------------------------------------------------
    # Text document synchronisation
    # -----------------------------------------------------------------------

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    def did_open(ls: SampleLanguageServer, params: lsp.DidOpenTextDocumentParams):
        td = params.text_document
        ls.documents.did_open(td.uri, td.language_id, td.version, td.text)

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    def did_change(ls: SampleLanguageServer, params: lsp.DidChangeTextDocumentParams):
        td = params.text_document
        ls.documents.did_change(td.uri, td.version, params.content_changes)

    @server.feature(lsp.TEXT_DOCUMENT_WILL_SAVE)
    def will_save(ls: SampleLanguageServer, params: lsp.WillSaveTextDocumentParams):
        ls.documents.will_save(params.text_document.uri, params.reason)

    @server.feature(lsp.TEXT_DOCUMENT_WILL_SAVE_WAIT_UNTIL)
    def will_save_wait_until(ls: SampleLanguageServer, params: lsp.WillSaveTextDocumentParams) -> list[lsp.TextEdit]:
        return ls.documents.will_save_wait_until(params.text_document.uri, params.reason)

    @server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
    def did_save(ls: SampleLanguageServer, params: lsp.DidSaveTextDocumentParams):
        ls.documents.did_save(params.text_document.uri)

    @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
    def did_close(ls: SampleLanguageServer, params: lsp.DidCloseTextDocumentParams):
        ls.documents.did_close(params.text_document.uri)

    # -----------------------------------------------------------------------
    # Completion
    # -----------------------------------------------------------------------

    @server.feature(lsp.TEXT_DOCUMENT_COMPLETION, COMPLETION_OPTIONS)
    def completion(ls: SampleLanguageServer, params: lsp.CompletionParams) -> list[lsp.CompletionItem]:
        return ls.session.completion(params)

    @server.feature(lsp.COMPLETION_ITEM_RESOLVE)
    def completion_resolve(ls: SampleLanguageServer, item: lsp.CompletionItem) -> lsp.CompletionItem:
        return ls.session.completion_resolve(item)


server = create_server()
