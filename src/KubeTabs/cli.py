from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from KubeTabs.app import discover_catalog, main as run_app
from KubeTabs.config import AppConfig
from KubeTabs.core.discovery import ResourceCatalog
from KubeTabs.core.exceptions import ConfigurationError, DiscoveryError
from KubeTabs.logger import AppLogger


def validate_kubeconfig(ctx, param, value):
    if value and os.pathsep not in value:
        path = Path(value).expanduser()
        if not path.is_file():
            raise click.BadParameter(f"Kubeconfig path is not a file: {path}")
    return value


def validate_context(ctx, param, value):
    if not value:
        return value
    kubeconfig_path = ctx.params.get("kubeconfig") or os.environ.get("KUBECONFIG")
    if not kubeconfig_path:
        kubeconfig_path = str(Path.home() / ".kube" / "config")
    # Only the first file of a KUBECONFIG list is checked.
    config_path = Path(kubeconfig_path.split(os.pathsep)[0]).expanduser()
    if not config_path.exists():
        raise click.BadParameter(f"Kubeconfig file not found: {config_path}")
    try:
        config_data = yaml.safe_load(config_path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise click.BadParameter(f"Failed to read kubeconfig: {e}")
    contexts = [c["name"] for c in config_data.get("contexts") or []]
    if value not in contexts:
        raise click.BadParameter(
            f"Context '{value}' not found. Available: {', '.join(contexts)}"
        )
    return value


def format_catalog(catalog: ResourceCatalog) -> list[str]:
    """One 'alias -> descriptor' line per alias, sorted by alias."""
    lines = []
    for alias, descriptor in sorted(catalog.items()):
        scope = "namespaced" if descriptor.namespaced else "cluster"
        short_names = ",".join(descriptor.short_names) or "-"
        lines.append(
            f"{alias} -> {descriptor.kind} {descriptor.api_version} "
            f"plural={descriptor.plural} singular={descriptor.singular or '-'} "
            f"short={short_names} {scope} verbs={','.join(sorted(descriptor.verbs))}"
        )
    return lines


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--kubeconfig",
    envvar="KUBECONFIG",
    callback=validate_kubeconfig,
    help="Path to the kubeconfig file.",
)
@click.option(
    "--context",
    envvar="KUBE_CONTEXT",
    callback=validate_context,
    help="The name of the kubeconfig context to use.",
)
@click.option("--log-level", envvar="LOG_LEVEL", help="Logging level.")
@click.option(
    "--log-file",
    envvar="KUBETABS_LOG_FILE",
    type=click.Path(dir_okay=False),
    help="Write logs to this file while the TUI is running.",
)
@click.option(
    "-n",
    "--namespace",
    envvar="KUBETABS_NAMESPACE",
    help="Namespace new tabs start in.",
)
@click.option(
    "-A",
    "--all-namespaces",
    is_flag=True,
    help="Start new tabs across all namespaces.",
)
@click.option("--wide", is_flag=True, help="Show low-priority columns too.")
@click.option(
    "--refresh-interval",
    type=float,
    envvar="KUBETABS_REFRESH_INTERVAL",
    help="Seconds between refreshes when no key is pressed.",
)
@click.option(
    "--request-timeout",
    type=float,
    envvar="KUBETABS_REQUEST_TIMEOUT",
    help="Seconds before a single API request is abandoned.",
)
@click.option(
    "--discovery",
    is_flag=True,
    help="Print every resource alias and its descriptor, then exit.",
)
def main(
    kubeconfig: Optional[str],
    context: Optional[str],
    log_level: Optional[str],
    log_file: Optional[str],
    namespace: Optional[str],
    all_namespaces: bool,
    wide: bool,
    refresh_interval: Optional[float],
    request_timeout: Optional[float],
    discovery: bool,
) -> None:
    """A tabbed terminal browser for Kubernetes resources."""
    try:
        app_config = AppConfig.from_env(
            kubeconfig=kubeconfig if kubeconfig and os.pathsep not in kubeconfig else None,
            context=context,
            log_level=log_level,
            log_file=log_file,
            default_namespace=namespace,
            all_namespaces=all_namespaces,
            wide=wide,
            refresh_interval=refresh_interval,
            request_timeout=request_timeout,
        )
    except ConfigurationError as e:
        click.secho(f"ERROR: {e}", fg="red", err=True)
        sys.exit(2)

    try:
        if discovery:
            app_logger = AppLogger(app_config, to_stderr=True)
            try:
                catalog = asyncio.run(discover_catalog(app_config))
            finally:
                app_logger.stop()
            for line in format_catalog(catalog):
                click.echo(line)
            return

        asyncio.run(run_app(app_config))
    except (ConfigurationError, DiscoveryError) as e:
        click.secho(f"ERROR: {e}", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
