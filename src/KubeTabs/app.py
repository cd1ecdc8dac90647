from __future__ import annotations

import logging

from textual import work
from textual.app import App

from KubeTabs.config import AppConfig
from KubeTabs.core.discovery import ResourceCatalog
from KubeTabs.core.key_channel import KeyChannel
from KubeTabs.core.kubernetes_client import KubernetesClient
from KubeTabs.core.refresh_loop import Frame, RefreshLoop, TableClient
from KubeTabs.core.session import KeyPress, SessionState
from KubeTabs.logger import AppLogger
from KubeTabs.screens.main_screen import MainScreen

log = logging.getLogger(__name__)


class KubeTabs(App[None]):
    """A Textual application for KubeTabs."""

    TITLE = "KubeTabs"
    SUB_TITLE = "Kubernetes resource tabs"
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        app_config: AppConfig,
        client: TableClient,
        catalog: ResourceCatalog,
    ) -> None:
        super().__init__()
        self._config = app_config
        self.session = SessionState(default_namespace=app_config.tab_namespace)
        self.key_channel = KeyChannel()
        self.refresh_loop = RefreshLoop(
            catalog,
            client,
            self.session,
            refresh_interval=app_config.refresh_interval,
            wide=app_config.wide,
        )
        self._main_screen = MainScreen()

    @property
    def config(self) -> AppConfig:
        """Returns the app configuration."""
        return self._config

    async def on_mount(self) -> None:
        await self.push_screen(self._main_screen)
        self.run_refresh_loop()

    def draw(self, frame: Frame) -> None:
        self._main_screen.draw(frame)

    async def read_event(self, timeout: float | None) -> KeyPress | None:
        return await self.key_channel.read(timeout)

    @work(exclusive=True)
    async def run_refresh_loop(self) -> None:
        await self.refresh_loop.run(self)
        self.exit()

    def on_unmount(self) -> None:
        """Called when the app is unmounted."""
        self.key_channel.close()


async def discover_catalog(app_config: AppConfig) -> ResourceCatalog:
    """Connects, builds the resource catalog and disconnects."""
    kubernetes_client = await KubernetesClient.create(app_config)
    try:
        return await ResourceCatalog.discover(kubernetes_client)
    finally:
        await kubernetes_client.close()


async def main(app_config: AppConfig) -> None:
    """The main entry point for the KubeTabs TUI application."""
    app_logger = AppLogger(app_config)
    try:
        kubernetes_client = await KubernetesClient.create(app_config)
        try:
            catalog = await ResourceCatalog.discover(kubernetes_client)
            app = KubeTabs(app_config, kubernetes_client, catalog)
            await app.run_async()
        finally:
            await kubernetes_client.close()
    finally:
        app_logger.stop()
