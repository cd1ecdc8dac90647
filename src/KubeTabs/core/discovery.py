"""Resource discovery and alias resolution.

The catalog maps every name an operator may type for a resource type
(singular, plural and short names) to a :class:`ResourceDescriptor`.
Non-core API groups are indexed first and the core group last, so that a
core resource always wins an alias shared with a non-core one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, NamedTuple, Protocol

from aiohttp import ClientError
from kubernetes_asyncio.client.exceptions import ApiException

from KubeTabs.core.exceptions import (
    AmbiguousGroupVersion,
    DiscoveryError,
    UnresolvedAlias,
)

log = logging.getLogger(__name__)

TABLE_ACCEPT_HEADER = "application/json;as=Table;g=meta.k8s.io;v=v1"


class TableRequest(NamedTuple):
    """A read request asking the server for its tabular representation."""

    method: str
    path: str
    headers: dict[str, str]


def split_group_version(group_version: str) -> tuple[str, str]:
    """Splits 'apps/v1' into ('apps', 'v1') and 'v1' into ('', 'v1')."""
    group, _, version = group_version.rpartition("/")
    if not version:
        raise ValueError(f"Invalid group version: '{group_version}'")
    return group, version


@dataclass(frozen=True)
class ResourceDescriptor:
    """The fully qualified identity of one listable resource type."""

    group: str
    version: str
    kind: str
    plural: str
    singular: str = ""
    short_names: tuple[str, ...] = ()
    verbs: frozenset[str] = field(default_factory=frozenset)
    namespaced: bool = False

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def is_core(self) -> bool:
        return not self.group

    @property
    def aliases(self) -> list[str]:
        """Every name this resource is indexed under, in insertion order."""
        names = [name for name in (self.singular, self.plural) if name]
        names.extend(self.short_names)
        return names

    @classmethod
    def from_api_resource(
        cls, raw: Mapping[str, Any], group_version: str
    ) -> ResourceDescriptor:
        """Builds a descriptor from one entry of an APIResourceList."""
        group, version = split_group_version(group_version)
        return cls(
            group=raw.get("group") or group,
            version=raw.get("version") or version,
            kind=raw["kind"],
            plural=raw["name"],
            singular=raw.get("singularName") or "",
            short_names=tuple(raw.get("shortNames") or ()),
            verbs=frozenset(raw["verbs"]),
            namespaced=bool(raw.get("namespaced", False)),
        )

    def url_path(self, namespace: str | None = None) -> str:
        prefix = "/api" if self.is_core else f"/apis/{self.group}"
        namespace_segment = f"namespaces/{namespace}/" if namespace is not None else ""
        return f"{prefix}/{self.version}/{namespace_segment}{self.plural}"

    def table_request(self, namespace: str | None = None) -> TableRequest:
        return TableRequest(
            method="GET",
            path=self.url_path(namespace),
            headers={"Accept": TABLE_ACCEPT_HEADER},
        )


class DiscoveryClient(Protocol):
    """The subset of the API client used to build the catalog."""

    async def list_api_groups(self) -> Mapping[str, Any]: ...

    async def list_api_group_resources(
        self, group_version: str
    ) -> Mapping[str, Any]: ...

    async def list_core_api_versions(self) -> Mapping[str, Any]: ...

    async def list_core_api_resources(self, version: str) -> Mapping[str, Any]: ...


def preferred_group_version(group: Mapping[str, Any]) -> str:
    """Returns the preferred groupVersion of an APIGroup, or its first one."""
    preferred = group.get("preferredVersion")
    if preferred:
        return preferred["groupVersion"]
    versions = group.get("versions") or []
    if not versions:
        raise AmbiguousGroupVersion(group.get("name", ""))
    return versions[0]["groupVersion"]


class ResourceCatalog:
    """An immutable alias -> ResourceDescriptor index."""

    def __init__(self, by_alias: Mapping[str, ResourceDescriptor]) -> None:
        self._by_alias: Mapping[str, ResourceDescriptor] = MappingProxyType(
            dict(by_alias)
        )

    def __len__(self) -> int:
        return len(self._by_alias)

    def __contains__(self, alias: object) -> bool:
        return isinstance(alias, str) and self.get(alias) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_alias)

    def items(self) -> Iterable[tuple[str, ResourceDescriptor]]:
        return self._by_alias.items()

    @staticmethod
    def _normalize(alias: str) -> str:
        return alias.strip().lower()

    def get(self, alias: str) -> ResourceDescriptor | None:
        return self._by_alias.get(self._normalize(alias))

    def resolve(self, alias: str) -> ResourceDescriptor:
        descriptor = self.get(alias)
        if descriptor is None:
            raise UnresolvedAlias(alias)
        return descriptor

    @classmethod
    def build(
        cls,
        group_resource_lists: Iterable[Mapping[str, Any]],
        core_resource_lists: Iterable[Mapping[str, Any]],
    ) -> ResourceCatalog:
        """Indexes already listed APIResourceLists.

        Non-core lists are indexed before core lists so that core resources
        take precedence on a shared alias.
        """
        by_alias: dict[str, ResourceDescriptor] = {}
        try:
            for resource_list in group_resource_lists:
                cls._index_resource_list(by_alias, resource_list)
            for resource_list in core_resource_lists:
                cls._index_resource_list(by_alias, resource_list)
        except (KeyError, TypeError, ValueError) as e:
            raise DiscoveryError(f"Malformed API resource list: {e!r}") from e
        return cls(by_alias)

    @staticmethod
    def _index_resource_list(
        by_alias: dict[str, ResourceDescriptor], resource_list: Mapping[str, Any]
    ) -> None:
        group_version = resource_list["groupVersion"]
        for raw in resource_list.get("resources") or []:
            if "list" not in (raw.get("verbs") or ()):
                continue
            descriptor = ResourceDescriptor.from_api_resource(raw, group_version)
            for alias in descriptor.aliases:
                alias = alias.lower()
                previous = by_alias.get(alias)
                if previous is not None and previous != descriptor:
                    if previous.is_core == descriptor.is_core:
                        log.warning(
                            "Alias '%s' is shared by %s.%s and %s.%s; using the latter.",
                            alias,
                            previous.plural,
                            previous.api_version,
                            descriptor.plural,
                            descriptor.api_version,
                        )
                    else:
                        log.debug(
                            "Core resource %s takes alias '%s' from %s.%s",
                            descriptor.plural,
                            alias,
                            previous.plural,
                            previous.api_version,
                        )
                by_alias[alias] = descriptor

    @classmethod
    async def discover(cls, client: DiscoveryClient) -> ResourceCatalog:
        """Lists every API group and the core group, then builds the catalog."""
        try:
            group_lists = []
            api_groups = await client.list_api_groups()
            for group in api_groups.get("groups") or []:
                group_version = preferred_group_version(group)
                log.debug("Listing resources of %s", group_version)
                group_lists.append(
                    await client.list_api_group_resources(group_version)
                )

            core_lists = []
            core_versions = await client.list_core_api_versions()
            for version in core_versions.get("versions") or []:
                log.debug("Listing resources of core %s", version)
                core_lists.append(await client.list_core_api_resources(version))
        except DiscoveryError:
            raise
        except ApiException as e:
            raise DiscoveryError(
                f"API server rejected discovery request (HTTP {e.status}): {e.reason}"
            ) from e
        except (ClientError, asyncio.TimeoutError, OSError) as e:
            raise DiscoveryError(f"Could not reach the API server: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise DiscoveryError(f"Malformed discovery response: {e!r}") from e

        catalog = cls.build(group_lists, core_lists)
        log.info(
            "Discovered %d aliases across %d group versions",
            len(catalog),
            len(group_lists) + len(core_lists),
        )
        return catalog
