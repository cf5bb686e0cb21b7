"""
Per-document settings.

Two modes, chosen once at ``initialize`` time:

1. The client supports ``workspace/configuration``: settings are pulled per
   document URI (section ``languageServerExample``) and memoised as an
   ``asyncio`` future.  Concurrent callers for the same URI share one pull.
2. Otherwise a single global :class:`ExampleSettings` value is used for
   every document; it is replaced from ``workspace/didChangeConfiguration``
   payloads.

``invalidate_all`` drops every memoised entry (configuration changed) and
``remove`` drops one (document closed).  Futures already handed out are
never cancelled, only no longer reused.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

SECTION = 'languageServerExample'
DEFAULT_MAX_NUMBER_OF_PROBLEMS = 1000


def _non_negative_int(value: Any) -> int | None:
    # bool is an int subclass; JSON true/false is not a problem count
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


@dataclass(frozen=True)
class ExampleSettings:
    max_number_of_problems: int = DEFAULT_MAX_NUMBER_OF_PROBLEMS

    @classmethod
    def from_section(cls, section: Any) -> ExampleSettings:
        """Build settings from the ``languageServerExample`` section blob."""
        if not isinstance(section, dict):
            return DEFAULT_SETTINGS
        value = _non_negative_int(section.get('maxNumberOfProblems'))
        if value is None:
            return DEFAULT_SETTINGS
        return cls(max_number_of_problems=value)

    @classmethod
    def from_payload(cls, payload: Any) -> ExampleSettings:
        """Build settings from a whole ``didChangeConfiguration`` settings blob."""
        if not isinstance(payload, dict):
            return DEFAULT_SETTINGS
        return cls.from_section(payload.get(SECTION))


DEFAULT_SETTINGS = ExampleSettings()

# (uri, section) -> raw section blob, as returned by workspace/configuration
ConfigurationFetcher = Callable[[str, str], Awaitable[Any]]


class SettingsCache:
    """Memoised per-URI settings futures."""

    def __init__(self, fetch: ConfigurationFetcher):
        self._fetch = fetch
        self.pull_enabled = False
        self.global_settings = DEFAULT_SETTINGS
        self._entries: dict[str, asyncio.Future] = {}

    def __contains__(self, uri: object) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, uri: str) -> asyncio.Future:
        """Return a future resolving to the settings for *uri*.

        Must be called with a running event loop.
        """
        if not self.pull_enabled:
            future = asyncio.get_running_loop().create_future()
            future.set_result(self.global_settings)
            return future

        entry = self._entries.get(uri)
        if entry is None:
            entry = asyncio.ensure_future(self._pull(uri))
            self._entries[uri] = entry
            entry.add_done_callback(lambda f: self._forget_failed(uri, f))
        return entry

    def invalidate_all(self) -> None:
        self._entries.clear()

    def remove(self, uri: str) -> None:
        self._entries.pop(uri, None)

    async def _pull(self, uri: str) -> ExampleSettings:
        section = await self._fetch(uri, SECTION)
        return ExampleSettings.from_section(section)

    def _forget_failed(self, uri: str, future: asyncio.Future) -> None:
        if future.cancelled() or future.exception() is None:
            return
        logger.warning('settings pull for %s failed: %s', uri, future.exception())
        # a later get() retries, unless the entry was already replaced
        if self._entries.get(uri) is future:
            del self._entries[uri]
