"""
CLI entry point for jobliterator.

Parses options, loads credentials, then delegates to run_cleanup() and
prints the rendered report. Simulates unless -f/--delete is given.
"""

from __future__ import annotations

import sys
import tempfile
from typing import Optional

import click

from . import __version__
from .cleanup import run_cleanup
from .config import DEFAULT_DAYS, DEFAULT_KUBECONFIG, ENV_PREFIX
from .kubectl import ConfigError, KubectlError, load_client
from .report import render_report

# Shown at the bottom of jobliterator --help / jobliterator -h
EPILOG = """
Examples:

  jobliterator                          # List jobs finished 7+ days ago (all namespaces)
  jobliterator -n batch --days 30       # Only namespace batch, finished 30+ days ago
  jobliterator -f                       # Delete them (finished pods first, then the job)
  jobliterator -o                       # Also list pods whose job no longer exists
  jobliterator -f -o                    # Delete stale jobs and finished orphaned pods
  jobliterator --context staging        # Use another context from the kubeconfig
  jobliterator --in-cluster -f          # Run inside a pod with its service account

Pods that are still Pending/Running are never deleted.
"""


@click.command(
    context_settings={
        "help_option_names": ["-h", "--help"],
        "auto_envvar_prefix": ENV_PREFIX,
    },
    epilog=EPILOG,
)
@click.option(
    "--kubeconfig",
    default=DEFAULT_KUBECONFIG,
    show_default=True,
    metavar="PATH",
    help="Path to the kubeconfig file",
)
@click.option(
    "--in-cluster",
    "in_cluster",
    is_flag=True,
    help="Use the pod's service account instead of a kubeconfig file",
)
@click.option(
    "--context",
    "kube_context",
    metavar="NAME",
    help="Override current-context in the kubeconfig",
)
@click.option(
    "-n",
    "--namespace",
    "namespace",
    metavar="NS",
    help="Only look in namespace NS (default: all namespaces)",
)
@click.option(
    "-f",
    "--delete",
    "apply",
    is_flag=True,
    help="Delete for real (default: simulate without deleting)",
)
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=DEFAULT_DAYS,
    show_default=True,
    help="Delete jobs finished at least this many days ago",
)
@click.option(
    "-o",
    "--orphans",
    is_flag=True,
    help="Also handle pods whose job no longer exists",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Print each kubectl command to stderr",
)
@click.option(
    "--no-color",
    "no_color",
    is_flag=True,
    help="Plain headings (no ANSI bold)",
)
@click.version_option(__version__, "--version", prog_name="jobliterator")
def main(
    kubeconfig: str,
    in_cluster: bool,
    kube_context: Optional[str],
    namespace: Optional[str],
    apply: bool,
    days: int,
    orphans: bool,
    verbose: bool,
    no_color: bool,
) -> int:
    """
    Remove Kubernetes jobs that finished long ago, and their finished pods.

    A job qualifies when it has no active pods and completed at least
    --days days ago. Its Succeeded/Failed pods are deleted first, then the
    job. With -o, pods labelled job-name=X where job X is gone are handled
    the same way.

    A job with no completion time (failed, suspended or just created with
    no active pods) counts as completed at the Unix epoch, so it is
    eligible at once.
    """
    # Holds the generated kubeconfig in --in-cluster mode.
    with tempfile.TemporaryDirectory(prefix="jobliterator-") as workdir:
        try:
            client = load_client(
                kubeconfig,
                context=kube_context,
                in_cluster=in_cluster,
                workdir=workdir,
                verbose=verbose,
            )
        except ConfigError as e:
            raise click.ClickException(str(e)) from e

        try:
            report = run_cleanup(
                client,
                namespace=namespace or None,
                threshold=days,
                apply=apply,
                orphans=orphans,
            )
        except KubectlError as e:
            raise click.ClickException(f"Failed to list jobs: {e}") from e

    print(render_report(report, color=not no_color))
    return 0


if __name__ == "__main__":
    sys.exit(main())
