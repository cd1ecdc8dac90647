from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import orjson
from kubernetes_asyncio import client, config
from kubernetes_asyncio.client.api_client import ApiClient
from kubernetes_asyncio.client.exceptions import ApiException
from kubernetes_asyncio.config.config_exception import ConfigException

from KubeTabs.core.discovery import TableRequest
from KubeTabs.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from KubeTabs.config import AppConfig

log = logging.getLogger(__name__)


class KubernetesClient(ApiClient):
    """An ApiClient issuing raw JSON reads for discovery and Table listings."""

    @classmethod
    async def create(cls, app_config: AppConfig) -> KubernetesClient:
        context_kwarg = {"context": app_config.context} if app_config.context else {}
        try:
            await config.load_kube_config(
                config_file=app_config.kubeconfig, **context_kwarg
            )
        except (ConfigException, OSError) as e:
            raise ConfigurationError(f"Could not load kubeconfig: {e}") from e

        configuration = client.Configuration.get_default_copy()
        log.info("Kubeconfig loaded. Effective API host: %s", configuration.host)
        return cls(configuration, request_timeout=app_config.request_timeout)

    def __init__(
        self,
        configuration: client.Configuration,
        request_timeout: float | None = None,
    ) -> None:
        super().__init__(configuration)
        self._request_timeout = request_timeout

    async def _get_json(self, path: str, accept: str = "application/json") -> Any:
        response = await self.call_api(
            path,
            "GET",
            header_params={"Accept": accept},
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _preload_content=False,
            _request_timeout=self._request_timeout,
        )
        try:
            body = await response.read()
            if not 200 <= response.status <= 299:
                error = ApiException(status=response.status, reason=response.reason)
                error.body = body.decode("utf-8", errors="replace")
                raise error
        finally:
            response.release()
        return orjson.loads(body)

    async def list_api_groups(self) -> Any:
        return await self._get_json("/apis")

    async def list_api_group_resources(self, group_version: str) -> Any:
        return await self._get_json(f"/apis/{group_version}")

    async def list_core_api_versions(self) -> Any:
        return await self._get_json("/api")

    async def list_core_api_resources(self, version: str) -> Any:
        return await self._get_json(f"/api/{version}")

    async def get_table(self, request: TableRequest) -> Any:
        if request.method != "GET":
            raise ValueError(f"Unsupported table request method: {request.method}")
        return await self._get_json(request.path, accept=request.headers["Accept"])
