"""Version string reported to registries."""

from signet import __version__

BUILD_METADATA = "unreleased"
"""Build metadata appended to the version; release builds replace it."""


def get_version() -> str:
    """Return the version in SemVer 2 form, with build metadata when present."""
    if not BUILD_METADATA:
        return __version__
    return f"{__version__}+{BUILD_METADATA}"


def user_agent() -> str:
    """The ``User-Agent`` sent with every registry request."""
    return f"signet/{get_version()}"
