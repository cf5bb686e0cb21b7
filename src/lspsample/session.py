"""
Per-connection session controller.

Owns the capability flags negotiated at ``initialize``, the settings cache,
and the validation pipeline hung off the document store's events::

    didOpen/didChange -> DocumentStore -> on_did_change_content
        -> validate(): await settings -> run rule -> publishDiagnostics

Validations are independent tasks; there is no debouncing and no
cancellation, so a validation of an older edit may publish after a newer
one.  The editor only keeps the latest publish per URI.

The *client* is the outbound half of the connection.  In production it is
the pygls ``LanguageServer`` itself; it must provide
``text_document_publish_diagnostics``, ``workspace_configuration_async`` and
``client_register_capability_async``.
"""
from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from typing import Any

from lsprotocol import types as lsp

from lspsample.document import TextDocument
from lspsample.handlers import get_completions, get_diagnostics, resolve_completion
from lspsample.settings import SECTION, ExampleSettings, SettingsCache
from lspsample.store import DocumentStore, TextDocumentChangeEvent

logger = logging.getLogger(__name__)

COMPLETION_OPTIONS = lsp.CompletionOptions(resolve_provider=True)

SERVER_CAPABILITIES = lsp.ServerCapabilities(
    text_document_sync=lsp.TextDocumentSyncOptions(
        open_close=True,
        change=lsp.TextDocumentSyncKind.Full,
        will_save=True,
        will_save_wait_until=True,
        save=lsp.SaveOptions(include_text=False),
    ),
    completion_provider=COMPLETION_OPTIONS,
)


class SessionState(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    INITIALIZING = 'initializing'
    INITIALIZED = 'initialized'


def _apply_log_level(raw: Any) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw or not isinstance(raw, str):
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)


def _log_level_from(options: Any) -> Any:
    if isinstance(options, dict):
        return options.get('logLevel')
    return getattr(options, 'logLevel', None)


class Session:

    def __init__(self, client, documents: DocumentStore):
        self._client = client
        self.documents = documents
        self.settings = SettingsCache(self._fetch_section)
        self.state = SessionState.UNINITIALIZED

        self.has_configuration_capability = False
        self.has_workspace_folder_capability = False
        self.has_diagnostic_related_information_capability = False

        # validations in flight
        self._validations: set[asyncio.Future] = set()

        documents.on_did_change_content.subscribe(self._on_did_change_content)
        documents.on_did_close.subscribe(self._on_did_close)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, params: lsp.InitializeParams) -> lsp.InitializeResult:
        """Record the client capabilities and declare ours."""
        caps = params.capabilities
        workspace = caps.workspace
        text_document = caps.text_document
        publish = text_document.publish_diagnostics if text_document else None

        # No workspace/configuration support means one global settings
        # value for every document.
        self.has_configuration_capability = bool(workspace and workspace.configuration)
        self.has_workspace_folder_capability = bool(workspace and workspace.workspace_folders)
        self.has_diagnostic_related_information_capability = bool(
            publish and publish.related_information
        )
        self.settings.pull_enabled = self.has_configuration_capability

        _apply_log_level(_log_level_from(params.initialization_options))
        self.state = SessionState.INITIALIZING
        logger.info(
            'initialize: configuration=%s workspaceFolders=%s relatedInformation=%s',
            self.has_configuration_capability,
            self.has_workspace_folder_capability,
            self.has_diagnostic_related_information_capability,
        )
        return lsp.InitializeResult(capabilities=SERVER_CAPABILITIES)

    async def initialized(self) -> None:
        self.state = SessionState.INITIALIZED
        if not self.has_configuration_capability:
            return
        registration = lsp.Registration(
            id=str(uuid.uuid4()),
            method=lsp.WORKSPACE_DID_CHANGE_CONFIGURATION,
        )
        try:
            await self._client.client_register_capability_async(
                lsp.RegistrationParams(registrations=[registration])
            )
        except Exception:
            logger.warning('initialized: registering %s failed', registration.method, exc_info=True)

    def did_change_workspace_folders(self, params: lsp.DidChangeWorkspaceFoldersParams) -> None:
        if not self.has_workspace_folder_capability:
            return
        event = params.event
        logger.info(
            'Workspace folder change event received: added=%s removed=%s',
            [f.uri for f in event.added],
            [f.uri for f in event.removed],
        )

    def did_change_configuration(self, settings: Any) -> None:
        """Handle ``workspace/didChangeConfiguration`` and revalidate everything."""
        if self.has_configuration_capability:
            # payload ignored: every document re-pulls its own settings
            self.settings.invalidate_all()
        else:
            self.settings.global_settings = ExampleSettings.from_payload(settings)
        if isinstance(settings, dict) and isinstance(settings.get(SECTION), dict):
            _apply_log_level(settings[SECTION].get('logLevel'))

        for doc in self.documents.all():
            self._schedule_validation(doc)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(self, doc: TextDocument) -> None:
        settings = await self.settings.get(doc.uri)
        diags = get_diagnostics(
            doc,
            settings.max_number_of_problems,
            related_information=self.has_diagnostic_related_information_capability,
        )
        logger.debug('validate: %s -> %d diagnostics', doc.uri, len(diags))
        # an empty list clears what was published before
        self._client.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(uri=doc.uri, diagnostics=diags)
        )

    async def join(self) -> None:
        """Wait until every validation in flight (including ones they spawn) is done."""
        while self._validations:
            await asyncio.gather(*list(self._validations), return_exceptions=True)

    def _schedule_validation(self, doc: TextDocument) -> None:
        task = asyncio.ensure_future(self.validate(doc))
        self._validations.add(task)
        task.add_done_callback(self._validation_done)

    def _validation_done(self, task: asyncio.Future) -> None:
        self._validations.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error('validation failed', exc_info=(type(exc), exc, exc.__traceback__))

    def _on_did_change_content(self, event: TextDocumentChangeEvent) -> None:
        self._schedule_validation(event.document)

    def _on_did_close(self, event: TextDocumentChangeEvent) -> None:
        # only keep settings for open documents
        self.settings.remove(event.document.uri)

    async def _fetch_section(self, uri: str, section: str) -> Any:
        result = await self._client.workspace_configuration_async(
            lsp.ConfigurationParams(
                items=[lsp.ConfigurationItem(scope_uri=uri, section=section)]
            )
        )
        return result[0] if result else None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def completion(self, params: lsp.CompletionParams) -> list[lsp.CompletionItem]:
        return get_completions()

    def completion_resolve(self, item: lsp.CompletionItem) -> lsp.CompletionItem:
        return resolve_completion(item)
