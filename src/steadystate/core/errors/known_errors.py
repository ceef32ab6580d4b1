"""Default tables of known transient errors.

These are plain, read-only values. The engine never consults them on its
own: a caller opts in by passing one (or a merge of several) as
``RetryPolicy.known_errors``.

    policy = RetryPolicy(max_retries=3, known_errors=PACKER_RETRYABLE_ERRORS)
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .exceptions import PolicyConfigurationError

PACKER_RETRYABLE_ERRORS: Mapping[str, str] = MappingProxyType({
    "Script disconnected unexpectedly": (
        "Occasionally, Packer seems to lose connectivity to AWS, perhaps due to a brief network outage"
    ),
    "can not open /var/lib/apt/lists/archive.ubuntu.com_ubuntu_dists_xenial_InRelease": (
        "Occasionally, apt-get fails on ubuntu to update the cache"
    ),
})

TERRAFORM_RETRYABLE_ERRORS: Mapping[str, str] = MappingProxyType({
    "Failed to load state": "Failed to load backend state, possibly an S3 eventual consistency issue.",
    "Error installing provider": "Failed to download a Terraform provider plugin.",
    "Failed to query available provider packages": "Failed to reach the Terraform provider registry.",
    "Timeout while waiting for the plugin to start": "Provider plugin started too slowly.",
    "TLS handshake timeout": "Transient TLS handshake timeout talking to a remote endpoint.",
    "read: connection reset by peer": "Transient network issue (connection reset by peer).",
    "registry service is unreachable": "The Terraform registry was unreachable.",
    "Client.Timeout exceeded while awaiting headers": "Remote endpoint timed out while awaiting headers.",
})

KUBECTL_RETRYABLE_ERRORS: Mapping[str, str] = MappingProxyType({
    "connection refused": "The Kubernetes API server refused the connection (cluster still starting?).",
    "the server is currently unable to handle the request": "The Kubernetes API server is overloaded or restarting.",
    "etcdserver: request timed out": "etcd timed out serving the request.",
    "i/o timeout": "Network timeout talking to the Kubernetes API server.",
    "TLS handshake timeout": "Transient TLS handshake timeout talking to the Kubernetes API server.",
})

_TABLES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "packer": PACKER_RETRYABLE_ERRORS,
    "terraform": TERRAFORM_RETRYABLE_ERRORS,
    "kubectl": KUBECTL_RETRYABLE_ERRORS,
})


def available_tables() -> list[str]:
    """Names accepted by ``get_known_errors``."""
    return sorted(_TABLES)


def get_known_errors(*names: str) -> dict[str, str]:
    """Merge the named default tables into a fresh dict.

    Later names override earlier ones when they share a pattern.

    Raises:
        PolicyConfigurationError: If a name is not a known table.
    """
    merged: dict[str, str] = {}
    for name in names:
        try:
            merged.update(_TABLES[name])
        except KeyError:
            raise PolicyConfigurationError(
                f"unknown known-error table '{name}' (available: {', '.join(available_tables())})"
            ) from None
    return merged
