import pytest
from unittest.mock import AsyncMock, MagicMock

from KubeTabs.core.discovery import ResourceCatalog


def _api_resource(
    name,
    kind,
    *,
    singular="",
    short_names=None,
    verbs=("get", "list", "watch"),
    namespaced=True,
):
    """One entry of an APIResourceList as the API server returns it."""
    raw = {
        "name": name,
        "singularName": singular,
        "namespaced": namespaced,
        "kind": kind,
        "verbs": list(verbs),
    }
    if short_names:
        raw["shortNames"] = list(short_names)
    return raw


def _resource_list(group_version, *resources):
    return {
        "kind": "APIResourceList",
        "groupVersion": group_version,
        "resources": list(resources),
    }


def _api_group(name, *versions, preferred=None):
    group = {
        "name": name,
        "versions": [
            {"groupVersion": f"{name}/{version}", "version": version}
            for version in versions
        ],
    }
    if preferred:
        group["preferredVersion"] = {
            "groupVersion": f"{name}/{preferred}",
            "version": preferred,
        }
    return group


def _table_payload(headers, rows, priorities=None):
    """A meta.k8s.io/v1 Table with string columns."""
    priorities = priorities or [0] * len(headers)
    return {
        "kind": "Table",
        "apiVersion": "meta.k8s.io/v1",
        "metadata": {"resourceVersion": "1"},
        "columnDefinitions": [
            {
                "name": header,
                "type": "string",
                "format": "",
                "description": f"{header} column",
                "priority": priority,
            }
            for header, priority in zip(headers, priorities)
        ],
        "rows": [{"cells": list(cells), "object": {}} for cells in rows],
    }


@pytest.fixture
def api_resource():
    return _api_resource


@pytest.fixture
def resource_list():
    return _resource_list


@pytest.fixture
def api_group():
    return _api_group


@pytest.fixture
def table_payload():
    return _table_payload


@pytest.fixture
def core_v1():
    return _resource_list(
        "v1",
        _api_resource("pods", "Pod", singular="pod", short_names=["po"]),
        _api_resource("services", "Service", singular="service", short_names=["svc"]),
        _api_resource(
            "namespaces", "Namespace", singular="namespace", short_names=["ns"],
            namespaced=False,
        ),
        _api_resource("bindings", "Binding", singular="binding", verbs=["create"]),
        _api_resource("pods/log", "Pod", verbs=["get"]),
    )


@pytest.fixture
def apps_v1():
    return _resource_list(
        "apps/v1",
        _api_resource(
            "deployments", "Deployment", singular="deployment", short_names=["deploy"]
        ),
        _api_resource(
            "daemonsets", "DaemonSet", singular="daemonset", short_names=["ds"]
        ),
    )


@pytest.fixture
def metrics_v1beta1():
    # A non-core group that also calls its resources "pods".
    return _resource_list(
        "metrics.k8s.io/v1beta1",
        _api_resource("pods", "PodMetrics", singular="", short_names=["po"]),
        _api_resource("nodes", "NodeMetrics", namespaced=False),
    )


@pytest.fixture
def catalog(core_v1, apps_v1, metrics_v1beta1):
    return ResourceCatalog.build([apps_v1, metrics_v1beta1], [core_v1])


@pytest.fixture
def discovery_client(core_v1, apps_v1, metrics_v1beta1):
    """A client answering discovery requests from canned payloads."""
    by_group_version = {
        "apps/v1": apps_v1,
        "metrics.k8s.io/v1beta1": metrics_v1beta1,
    }
    client = MagicMock()
    client.list_api_groups = AsyncMock(
        return_value={
            "kind": "APIGroupList",
            "groups": [
                _api_group("apps", "v1", preferred="v1"),
                _api_group("metrics.k8s.io", "v1beta1", preferred="v1beta1"),
            ],
        }
    )
    client.list_api_group_resources = AsyncMock(
        side_effect=lambda group_version: by_group_version[group_version]
    )
    client.list_core_api_versions = AsyncMock(
        return_value={"kind": "APIVersions", "versions": ["v1"]}
    )
    client.list_core_api_resources = AsyncMock(return_value=core_v1)
    return client
