#!/usr/bin/env python3
"""
k8slse - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Discovers containers
3. Runs the probe/scan pipeline

All business logic is in the modules, following black box principles.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from k8slse import __version__
from k8slse.data import get_script
from k8slse.logging_config import configure_logging
from k8slse.models import OutputFormat
from k8slse.modules.config import ScanSettings, get_config, load_profile
from k8slse.modules.executor import KubectlExecutor
from k8slse.modules.inventory import (
    InventoryError,
    KubectlInventory,
    render_listing,
    split_option,
)
from k8slse.modules.pipeline import NoContainersFoundError, PipelineError, ScanPipeline
from k8slse.modules.status import QueuedStatusSink, StatusSink

logger = logging.getLogger("k8slse.main")


def _list_containers(inventory: KubectlInventory, pods: str, sink: StatusSink) -> None:
    sink.send("[+] Started\n")
    sink.send(f"[+] Creating a list of pods/containers for {inventory.namespace} namespace\n")
    sink.send(render_listing(inventory.listing(split_option(pods))))


def _scan_containers(
    inventory: KubectlInventory,
    pipeline: ScanPipeline,
    pods: str,
    containers: str,
    sink: StatusSink,
) -> None:
    sink.send("[+] Started\n")
    sink.send("[+] Creating a list of unique pods\n")
    refs = inventory.get_containers(split_option(pods), split_option(containers))
    if refs:
        sink.send(f"[+] Found {len(refs)} containers in {inventory.namespace} namespace\n")
    try:
        pipeline.run(refs)
    except NoContainersFoundError as e:
        raise NoContainersFoundError(f"{e} in namespace {inventory.namespace!r}") from e


@click.command(
    help=(
        "Enumerate the containers of a Kubernetes namespace with an audit script "
        "and save one report per container in text, ansi or html format."
    )
)
@click.option("-k", "--kubeconfig", default=None, help="Path to the kubeconfig file.")
@click.option("--context", default=None, help="kubeconfig context to use.")
@click.option("-n", "--namespace", default=None, help="Namespace to enumerate (default: default).")
@click.option(
    "-p", "--pods", default="",
    help="Pod or comma-separated pods to enumerate; all unique pods when omitted.",
)
@click.option(
    "-c", "--containers", default="",
    help="Container or comma-separated containers of the single pod given with -p.",
)
@click.option(
    "-o", "--output", "output_format", default=None,
    type=click.Choice(OutputFormat.choices(), case_sensitive=False),
    help="Report format (default: ansi).",
)
@click.option(
    "-d", "--directory", default=None, type=click.Path(file_okay=False, path_type=Path),
    help="Directory reports are saved to (default: current directory).",
)
@click.option("-w", "--workers", default=None, type=click.IntRange(min=1), help="Concurrency ceiling per stage.")
@click.option("--timeout", default=None, type=click.IntRange(min=1), help="Per exec timeout in seconds.")
@click.option("--profile", default=None, type=click.Path(dir_okay=False), help="YAML probe profile.")
@click.option("--script", default=None, type=click.Path(dir_okay=False), help="Audit script to run instead of the embedded one.")
@click.option("-q", "--quiet", is_flag=True, help="No status output and no confirmation prompt.")
@click.option("-l", "--list", "list_only", is_flag=True, help="List pods and containers, run nothing.")
@click.option("--debug", is_flag=True, help="Verbose diagnostic logging.")
@click.version_option(__version__, "-v", "--version", prog_name="k8slse")
def main(
    kubeconfig: Optional[str],
    context: Optional[str],
    namespace: Optional[str],
    pods: str,
    containers: str,
    output_format: Optional[str],
    directory: Optional[Path],
    workers: Optional[int],
    timeout: Optional[int],
    profile: Optional[str],
    script: Optional[str],
    quiet: bool,
    list_only: bool,
    debug: bool,
):
    try:
        config = get_config()
    except ValueError as e:
        click.echo(f"[-] Invalid configuration: {e}", err=True)
        sys.exit(1)

    configure_logging("DEBUG" if debug else config.get("log_level"))

    # Command line options win over the environment
    overrides = {
        "namespace": namespace,
        "kubeconfig": kubeconfig,
        "context": context,
        "output": output_format.lower() if output_format else None,
        "directory": str(directory) if directory else None,
        "workers": workers,
        "exec_timeout": timeout,
        "profile_file": profile,
        "script_file": script,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    inventory = KubectlInventory(
        namespace=config.get("namespace"),
        kubeconfig=config.get("kubeconfig"),
        context=config.get("context"),
        kubectl=config.get("kubectl"),
    )

    sink = QueuedStatusSink(quiet=quiet)
    exit_code = 0
    error: Optional[str] = None
    try:
        if list_only:
            _list_containers(inventory, pods, sink)
            return

        report_dir = Path(config.get("directory"))
        if not report_dir.is_dir():
            raise click.BadParameter(f"{report_dir} is not a directory", param_hint="'-d'")

        probe_profile = load_profile(config.get("profile_file"))
        settings = ScanSettings(
            script=get_script(config.get("script_file")),
            output_format=OutputFormat(config.get("output")),
            directory=report_dir,
            quiet=quiet,
            workers=config.get("workers"),
            shells=probe_profile.shells,
            utilities=probe_profile.utilities,
        )
        executor = KubectlExecutor(
            namespace=config.get("namespace"),
            kubeconfig=config.get("kubeconfig"),
            context=config.get("context"),
            kubectl=config.get("kubectl"),
            timeout=config.get("exec_timeout"),
        )
        pipeline = ScanPipeline(settings, executor, sink)
        _scan_containers(inventory, pipeline, pods, containers, sink)
    except (PipelineError, InventoryError) as e:
        error = str(e)
        exit_code = 1
    except (OSError, ValueError) as e:
        logger.debug("Setup failed", exc_info=True)
        error = f"[-] {e}"
        exit_code = 1
    finally:
        sink.close()

    if error:
        click.echo(error, err=True)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
