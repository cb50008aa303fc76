"""signet -- registry credential resolution for an artifact signing tool.

This package decides, for any remote registry host, which credential to
present, whether the connection may use plain HTTP, and which persistent
credential store to read and write, then builds an authenticated
:mod:`httpx` client for the artifact-repository layer.

Typical workflow::

    from signet.client import AuthenticatedClientFactory

    factory = AuthenticatedClientFactory.from_config()
    with factory.build("registry.example.com/app:v1") as repo:
        repo.http.get(repo.url("/v2/"))

Modules:
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and store locations.
    reference: Artifact reference and registry address parsing.
    security: Plain HTTP vs. TLS decisions.
    auth: Credential stores, store selection, and resolution.
    cache: Session-scoped credential cache.
    client: Authenticated registry client construction.
    exceptions: Exception hierarchy with exit-code mapping.
    output: Diagnostic output on stderr.
"""

__version__ = "0.3.0"
