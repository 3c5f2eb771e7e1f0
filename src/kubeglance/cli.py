# src/kubeglance/cli.py
"""Command-line entry point for cluster summaries."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
import structlog

from kubeglance.clients.kubernetes.kubeconfig import load_kubeconfig
from kubeglance.config.settings import LogLevel, Settings
from kubeglance.core.exceptions import KubeGlanceException
from kubeglance.core.utils import ensure_exec_path, setup_logging
from kubeglance.discovery.summary_orchestrator import SummaryOrchestrator
from kubeglance.models.summary_models import ClusterSummary

logger = structlog.get_logger(__name__)


def initialize_process(settings: Settings) -> None:
    """One-time process setup: logging and the exec search path."""
    setup_logging(
        log_level=settings.log_level.value,
        json_output=settings.log_format.value == "json"
    )
    if settings.fallback.augment_path:
        added = ensure_exec_path(settings.fallback.extra_bin_paths)
        if added:
            logger.debug("Extended PATH", added=added)


async def build_once(
    orchestrator: SummaryOrchestrator,
    settings: Settings,
    context: Optional[str],
    detail: bool
) -> ClusterSummary:
    """Build one summary, bounded by the configured timeout."""
    timeout = settings.summary.timeout_seconds
    try:
        return await asyncio.wait_for(orchestrator.build_summary(context, detail), timeout=timeout)
    except asyncio.TimeoutError:
        raise KubeGlanceException(f"Cluster summary timed out after {timeout:g}s", {"timeout": timeout})


def render_summary(summary: ClusterSummary, output: Optional[str]) -> None:
    document = json.dumps(summary.model_dump(mode="json"), indent=2)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            f.write(document)
        click.echo(f"📁 Summary saved to: {output_path}", err=True)
    else:
        click.echo(document)


@click.group()
@click.option('--kubeconfig', default=None, help='Path to kubeconfig (default: $KUBECONFIG_PATH or ~/.kube/config)')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, kubeconfig, debug):
    """Read-only summaries of the clusters in your kubeconfig."""
    settings = Settings.create_from_env()
    if kubeconfig:
        settings.kubernetes.kubeconfig_path = kubeconfig
    if debug:
        settings.debug = True
        settings.log_level = LogLevel.DEBUG

    initialize_process(settings)
    ctx.obj = settings


@main.command()
@click.option('--context', '-c', 'context_name', default=None, help='Context to summarize (default: current context)')
@click.option('--detail', is_flag=True, help='Include per-resource detail rows')
@click.option('--output', '-o', default=None, help='Write the JSON summary to this file')
@click.option('--interval', type=float, default=None, help='Refresh every N seconds (0 runs once)')
@click.pass_obj
def summary(settings: Settings, context_name, detail, output, interval):
    """
    Build a cluster summary and print it as JSON.

    Example:
        kubeglance summary --context prod --detail -o ./summary.json
    """
    context_name = context_name or settings.kubernetes.context
    if interval is None:
        interval = settings.summary.refresh_interval_seconds

    async def run_summary() -> int:
        orchestrator = SummaryOrchestrator.from_settings(settings)

        if interval <= 0:
            try:
                result = await build_once(orchestrator, settings, context_name, detail)
            except KubeGlanceException as e:
                click.echo(f"❌ Summary failed: {e}", err=True)
                return 1
            render_summary(result, output)
            return 0

        while True:
            try:
                result = await build_once(orchestrator, settings, context_name, detail)
                render_summary(result, output)
            except KubeGlanceException as e:
                click.echo(f"❌ Summary failed: {e}", err=True)
            await asyncio.sleep(interval)

    try:
        exit_code = asyncio.run(run_summary())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


@main.command()
@click.pass_obj
def contexts(settings: Settings):
    """List the contexts defined in the kubeconfig."""
    try:
        kubeconfig = load_kubeconfig(settings.kubernetes.kubeconfig_path)
    except KubeGlanceException as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    unique = {}
    for ctx in kubeconfig.contexts:
        unique.setdefault(ctx.name, ctx)

    for name in sorted(unique):
        ctx = unique[name]
        marker = "*" if name == kubeconfig.current_context else " "
        click.echo(
            f"{marker} {name}  cluster={ctx.cluster}  user={ctx.user}  namespace={ctx.namespace or '-'}"
        )


if __name__ == '__main__':
    main()
