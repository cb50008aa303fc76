"""Configuration management with XDG paths, atomic writes, and env inputs.

This module handles all persistent configuration for signet:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.signet/`` on macOS and Windows.  See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~signet.models.GlobalConfig` JSON
  file holding the insecure-registry allowlist and credential store options.
* **Store locations** -- :func:`credentials_file_path` for the file-backed
  store and :func:`docker_config_path` for the docker-compatible one.
* **Explicit credentials** -- :func:`explicit_credentials_from_env` reads
  ``SIGNET_USERNAME`` / ``SIGNET_PASSWORD``.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so that a crash never leaves a half-written
credential file behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from signet.exceptions import ConfigError
from signet.models import GlobalConfig

_APP_NAME = "signet"
_CONFIG_FILENAME = "config.json"
_CREDENTIALS_FILENAME = "credentials.json"
_DOCKER_CONFIG_FILENAME = "config.json"

ENV_USERNAME = "SIGNET_USERNAME"
ENV_PASSWORD = "SIGNET_PASSWORD"
ENV_DOCKER_CONFIG = "DOCKER_CONFIG"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/signet/`` (default ``~/.config/signet/``).
    On macOS/Windows: ``~/.signet/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (credentials), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/signet/`` (default ``~/.local/share/signet/``).
    On macOS/Windows: ``~/.signet/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  When *mode* is
    given, permissions are applied to the temp file before any content is
    written, so secrets are never readable by others even momentarily.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~signet.models.GlobalConfig`.  If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Store locations ---


def credentials_file_path(config: Optional[GlobalConfig] = None) -> Path:
    """Return the location of the file-backed credential store.

    ``config.credentials_file`` wins when set; otherwise the file lives at
    ``<data_dir>/credentials.json``.
    """
    if config is not None and config.credentials_file:
        return Path(config.credentials_file).expanduser()
    return get_data_dir() / _CREDENTIALS_FILENAME


def docker_config_path() -> Path:
    """Return the docker-compatible config file location.

    ``$DOCKER_CONFIG/config.json`` when the variable is set, otherwise
    ``~/.docker/config.json``.  The file is not created.
    """
    env_value = os.environ.get(ENV_DOCKER_CONFIG, "")
    base = Path(env_value).expanduser() if env_value else Path.home() / ".docker"
    return base / _DOCKER_CONFIG_FILENAME


# --- Explicit credential inputs ---


def explicit_credentials_from_env() -> tuple[Optional[str], Optional[str]]:
    """Return ``(username, password)`` from ``SIGNET_USERNAME`` / ``SIGNET_PASSWORD``.

    Empty variables are reported as ``None``.  These values are explicit
    inputs to credential resolution; they are never treated as a store.
    """
    username = os.environ.get(ENV_USERNAME) or None
    password = os.environ.get(ENV_PASSWORD) or None
    return username, password
