"""One frame at a time: resolve, fetch, decode, render, draw, wait."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from aiohttp import ClientError
from kubernetes_asyncio.client.exceptions import ApiException
from kubernetes_asyncio.config.config_exception import ConfigException

from KubeTabs.core.discovery import ResourceCatalog, ResourceDescriptor, TableRequest
from KubeTabs.core.exceptions import (
    DecodeError,
    FetchError,
    InputChannelClosed,
    UnresolvedAlias,
)
from KubeTabs.core.session import EditingMode, KeyPress, SessionState
from KubeTabs.core.table import (
    RenderedTable,
    ResourceTable,
    compute_column_widths,
    decode_table,
    filter_rows,
    render_table,
    select_columns,
)

log = logging.getLogger(__name__)


class TableClient(Protocol):
    async def get_table(self, request: TableRequest) -> Mapping[str, Any]: ...


class RenderSurface(Protocol):
    def draw(self, frame: Frame) -> None: ...

    async def read_event(self, timeout: float | None) -> KeyPress | None: ...


@dataclass(frozen=True)
class Frame:
    """Everything the terminal needs to paint one refresh."""

    tab_titles: tuple[str, ...]
    active_index: int
    namespace: str | None
    resource: str
    filter: str
    editing_mode: EditingMode
    resource_valid: bool
    descriptor: ResourceDescriptor | None
    table: RenderedTable | None
    error: str | None = None


@dataclass(frozen=True)
class _TableSlot:
    generation: int
    descriptor: ResourceDescriptor
    table: ResourceTable


class RefreshLoop:
    def __init__(
        self,
        catalog: ResourceCatalog,
        client: TableClient,
        session: SessionState,
        *,
        refresh_interval: float | None = 2.0,
        wide: bool = False,
    ) -> None:
        self.catalog = catalog
        self.session = session
        self.refresh_interval = refresh_interval
        self.wide = wide
        self._client = client
        # Last successfully fetched table per tab index.
        self._slots: dict[int, _TableSlot] = {}

    async def _fetch(
        self, descriptor: ResourceDescriptor, namespace: str | None
    ) -> ResourceTable:
        request = descriptor.table_request(namespace)
        log.debug("Fetching %s", request.path)
        try:
            payload = await self._client.get_table(request)
        except ApiException as e:
            raise FetchError(
                f"{descriptor.plural}: HTTP {e.status} {e.reason}", status=e.status
            ) from e
        except (ClientError, asyncio.TimeoutError, OSError) as e:
            reason = str(e) or type(e).__name__
            raise FetchError(f"{descriptor.plural}: {reason}") from e
        except ConfigException as e:
            # Credential refresh (exec plugin, OIDC) failed mid-session.
            raise FetchError(f"{descriptor.plural}: {e}") from e
        except ValueError as e:
            raise DecodeError(f"{descriptor.plural}: invalid JSON response: {e}") from e
        return decode_table(payload)

    def _store(
        self,
        index: int,
        generation: int,
        descriptor: ResourceDescriptor,
        table: ResourceTable,
    ) -> bool:
        """Stores a fetched table unless its tab changed while it was in flight."""
        tab = self.session.tabs[index]
        if tab.generation != generation:
            log.debug(
                "Discarding %s table for tab %d: generation %d is now %d",
                descriptor.plural,
                index,
                generation,
                tab.generation,
            )
            return False
        self._slots[index] = _TableSlot(generation, descriptor, table)
        return True

    def _render(self, index: int, filter_text: str) -> RenderedTable | None:
        slot = self._slots.get(index)
        if slot is None:
            return None
        table = filter_rows(select_columns(slot.table, self.wide), filter_text)
        return render_table(table, compute_column_widths(table))

    async def refresh(self) -> Frame:
        """Builds one frame for the active tab."""
        index = self.session.active_index
        tab = self.session.active_tab
        generation = tab.generation
        error: str | None = None

        try:
            descriptor: ResourceDescriptor | None = self.catalog.resolve(tab.resource)
        except UnresolvedAlias as e:
            log.debug("%s", e)
            descriptor = None

        if descriptor is not None:
            namespace = tab.namespace if descriptor.namespaced and tab.namespace else None
            try:
                table = await self._fetch(descriptor, namespace)
            except (FetchError, DecodeError) as e:
                log.warning("Refresh of %s failed: %s", descriptor.plural, e)
                error = str(e)
            except Exception as e:
                log.exception("Unexpected error refreshing %s", descriptor.plural)
                error = f"{descriptor.plural}: {str(e) or type(e).__name__}"
            else:
                self._store(index, generation, descriptor, table)

        return Frame(
            tab_titles=tuple(
                f"{i + 1}:{t.resource}" for i, t in enumerate(self.session.tabs)
            ),
            active_index=index,
            namespace=tab.namespace,
            resource=tab.resource,
            filter=tab.filter,
            editing_mode=self.session.editing_mode,
            resource_valid=descriptor is not None,
            descriptor=descriptor,
            table=self._render(index, tab.filter),
            error=error,
        )

    async def run(self, surface: RenderSurface) -> None:
        """Draws frames until the session is quit or input is closed."""
        while not self.session.finished:
            surface.draw(await self.refresh())
            try:
                key = await surface.read_event(self.refresh_interval)
            except InputChannelClosed:
                log.info("Input closed, ending session")
                return
            if key is not None:
                self.session.handle_key(key)
        log.info("Session finished")
