"""Transport security policy: plain HTTP or TLS for a registry host.

The decision is made per connection from three inputs, in strict order:

1. an explicit plain-HTTP request from the operator always wins;
2. a host listed in the configured insecure-registry allowlist uses plain HTTP;
3. ``localhost`` (any port) uses plain HTTP;
4. everything else uses TLS.

A heuristic never overrides an explicit request, and a later rule is never
consulted once an earlier one has decided.
"""

from __future__ import annotations

from collections.abc import Iterable

from signet.models import GlobalConfig, SecurityDecision
from signet.reference import normalize_host, split_host_port

LOCALHOST = "localhost"


def decide(
    host: str,
    plain_http: bool = False,
    insecure_registries: Iterable[str] = (),
) -> SecurityDecision:
    """Decide the transport security for *host*.

    Args:
        host: ``host[:port]`` of the registry.
        plain_http: The operator's explicit plain-HTTP flag.
        insecure_registries: Allowlisted ``host[:port]`` entries.  Both sides
            are normalized, then compared exactly.

    Returns:
        :attr:`SecurityDecision.PLAIN_HTTP` or :attr:`SecurityDecision.TLS`.

    Raises:
        InvalidReferenceError: If *host* or an allowlist entry is not a
            valid registry address.
    """
    if plain_http:
        return SecurityDecision.PLAIN_HTTP
    host = normalize_host(host)
    if host in {normalize_host(entry) for entry in insecure_registries}:
        return SecurityDecision.PLAIN_HTTP
    address, _ = split_host_port(host)
    if address == LOCALHOST:
        return SecurityDecision.PLAIN_HTTP
    return SecurityDecision.TLS


class ConnectionSecurityPolicy:
    """Transport security decisions bound to one insecure-registry allowlist.

    Example::

        policy = ConnectionSecurityPolicy.from_config(load_global_config())
        policy.decide("localhost:5000")            # PLAIN_HTTP
        policy.decide("registry.example.com")      # TLS
    """

    def __init__(self, insecure_registries: Iterable[str] = ()) -> None:
        self._insecure = frozenset(normalize_host(entry) for entry in insecure_registries)

    @classmethod
    def from_config(cls, config: GlobalConfig) -> ConnectionSecurityPolicy:
        return cls(config.insecure_registries)

    @property
    def insecure_registries(self) -> frozenset[str]:
        return self._insecure

    def is_registry_insecure(self, host: str) -> bool:
        """Whether *host* appears in the insecure-registry allowlist."""
        return normalize_host(host) in self._insecure

    def decide(self, host: str, plain_http: bool = False) -> SecurityDecision:
        """Decide the transport security for *host*; see :func:`decide`."""
        return decide(host, plain_http, self._insecure)
