"""
Kubectl invocation and the Job/Pod operations jobliterator needs.

All cluster access goes through subprocess kubectl calls. KubectlClient
carries the credential flags (kubeconfig, context) and exposes list, get
and delete for Jobs and Pods. Failures raise KubectlError; a lookup of a
Job that does not exist raises NotFoundError so callers never have to
read kubectl's stderr themselves.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional

from .config import (
    KUBECTL_TIMEOUT,
    SERVICE_ACCOUNT_CA,
    SERVICE_ACCOUNT_TOKEN,
)
from .models import Job, Pod


class KubectlError(Exception):
    """A kubectl call failed (non-zero exit, timeout, unparsable output)."""

    def __init__(
        self,
        message: str,
        command: Optional[list[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class NotFoundError(KubectlError):
    """The requested resource does not exist."""


class ConfigError(Exception):
    """Credentials could not be loaded; nothing can be done without them."""


def run_kubectl(
    args: list[str],
    timeout: int = KUBECTL_TIMEOUT,
) -> subprocess.CompletedProcess:
    """
    Run kubectl with the given args.

    Args:
        args: List of arguments (e.g. ["get", "pods", "-A", "-o", "json"]).
        timeout: Seconds before the call is abandoned.

    Returns:
        CompletedProcess with returncode, stdout, stderr.
    """
    cmd = ["kubectl"] + args
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def _scope_args(namespace: Optional[str]) -> list[str]:
    # Empty namespace means every namespace.
    if namespace:
        return ["-n", namespace]
    return ["-A"]


def _last_line(text: str) -> str:
    lines = [line for line in (text or "").strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""


class KubectlClient:
    """
    Job/Pod operations against one cluster.

    Args:
        kubeconfig: Path passed as --kubeconfig, or None to let kubectl decide.
        context: Context passed as --context, or None for current-context.
        timeout: Per-call timeout in seconds.
        verbose: Echo every kubectl command line to stderr.
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        timeout: int = KUBECTL_TIMEOUT,
        verbose: bool = False,
    ):
        self.kubeconfig = kubeconfig
        self.context = context
        self.timeout = timeout
        self.verbose = verbose

    def _global_args(self) -> list[str]:
        args = []
        if self.kubeconfig:
            args.extend(["--kubeconfig", self.kubeconfig])
        if self.context:
            args.extend(["--context", self.context])
        return args

    def run(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run kubectl with credential flags; raise KubectlError on failure."""
        full_args = self._global_args() + args
        if self.verbose:
            print(f"$ kubectl {' '.join(full_args)}", file=sys.stderr)
        try:
            result = run_kubectl(full_args, timeout=self.timeout)
        except FileNotFoundError as e:
            raise KubectlError("kubectl not found on PATH", command=full_args) from e
        except subprocess.TimeoutExpired as e:
            raise KubectlError(
                f"kubectl timed out after {self.timeout}s", command=full_args
            ) from e
        if result.returncode != 0:
            stderr = result.stderr or ""
            message = _last_line(stderr) or f"kubectl exited with {result.returncode}"
            # kubectl prints "Error from server (NotFound): ..." for a missing object
            error_cls = NotFoundError if "(NotFound)" in stderr else KubectlError
            raise error_cls(
                message, command=full_args, returncode=result.returncode, stderr=stderr
            )
        return result

    def get_json(self, args: list[str]) -> dict:
        result = self.run(args + ["-o", "json"])
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise KubectlError(f"invalid JSON from kubectl: {e}", command=list(result.args)) from e

    def list_jobs(self, namespace: Optional[str] = None) -> list[Job]:
        obj = self.get_json(["get", "jobs"] + _scope_args(namespace))
        return [Job.from_json(item) for item in obj.get("items", [])]

    def list_pods(
        self,
        namespace: Optional[str] = None,
        label_filter: Optional[tuple[str, str]] = None,
    ) -> list[Pod]:
        args = ["get", "pods"] + _scope_args(namespace)
        if label_filter:
            key, value = label_filter
            args.extend(["-l", f"{key}={value}"])
        obj = self.get_json(args)
        return [Pod.from_json(item) for item in obj.get("items", [])]

    def get_job(self, name: str, namespace: str) -> Job:
        """Fetch one Job. Raises NotFoundError if it does not exist."""
        return Job.from_json(self.get_json(["get", "job", name, "-n", namespace]))

    def delete_job(self, name: str, namespace: str) -> None:
        # Orphan propagation: the garbage collector must not remove pods we skipped.
        self.run(
            [
                "delete",
                "job",
                name,
                "-n",
                namespace,
                "--cascade=orphan",
                "--ignore-not-found",
                "--wait=false",
            ]
        )

    def delete_pod(self, name: str, namespace: str) -> None:
        self.run(
            ["delete", "pod", name, "-n", namespace, "--ignore-not-found", "--wait=false"]
        )


def in_cluster_kubeconfig(directory: str) -> str:
    """
    Write a kubeconfig that points kubectl at the pod's service account.

    The token is referenced by path (tokenFile), so it never appears on a
    kubectl command line. Raises ConfigError when not running in a pod.

    Returns:
        Path of the written kubeconfig (JSON, which kubectl accepts as YAML).
    """
    host = os.environ.get("KUBERNETES_SERVICE_HOST")
    port = os.environ.get("KUBERNETES_SERVICE_PORT")
    if not host or not port:
        raise ConfigError(
            "KUBERNETES_SERVICE_HOST/KUBERNETES_SERVICE_PORT not set; not running in a cluster"
        )
    for path in (SERVICE_ACCOUNT_TOKEN, SERVICE_ACCOUNT_CA):
        if not Path(path).is_file():
            raise ConfigError(f"service account file missing: {path}")
    if ":" in host:
        host = f"[{host}]"
    config = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [
            {
                "name": "in-cluster",
                "cluster": {
                    "server": f"https://{host}:{port}",
                    "certificate-authority": SERVICE_ACCOUNT_CA,
                },
            }
        ],
        "users": [{"name": "service-account", "user": {"tokenFile": SERVICE_ACCOUNT_TOKEN}}],
        "contexts": [
            {
                "name": "in-cluster",
                "context": {"cluster": "in-cluster", "user": "service-account"},
            }
        ],
        "current-context": "in-cluster",
    }
    path = Path(directory) / "kubeconfig"
    path.write_text(json.dumps(config, indent=2))
    return str(path)


def load_client(
    kubeconfig: str,
    context: Optional[str] = None,
    in_cluster: bool = False,
    workdir: Optional[str] = None,
    verbose: bool = False,
) -> KubectlClient:
    """
    Build a KubectlClient and check that its credentials load.

    Args:
        kubeconfig: Kubeconfig path (ignored when in_cluster is set).
        context: Optional context override (ignored when in_cluster is set).
        in_cluster: Use the pod's service account instead of a kubeconfig file.
        workdir: Directory for the generated in-cluster kubeconfig.
        verbose: Echo kubectl command lines.

    Raises:
        ConfigError: The kubeconfig is unreadable, the context is unknown,
            kubectl is missing, or in-cluster credentials are absent.
    """
    if in_cluster:
        if not workdir:
            raise ConfigError("in-cluster mode needs a working directory")
        client = KubectlClient(
            kubeconfig=in_cluster_kubeconfig(workdir), verbose=verbose
        )
    else:
        if not Path(kubeconfig).is_file():
            raise ConfigError(f"Failed to read kubeconfig ({kubeconfig})")
        client = KubectlClient(kubeconfig=kubeconfig, context=context or None, verbose=verbose)

    # config view parses the file and resolves the context without touching the API server
    try:
        client.run(["config", "view", "--minify", "-o", "json"])
    except KubectlError as e:
        raise ConfigError(f"Failed to load kubeconfig ({client.kubeconfig}): {e}") from e
    return client
