"""Configuration loading with XDG paths, atomic writes, and env overrides.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.quotafetch/`` on macOS and Windows.  See :func:`get_config_dir`.
* **Config file** -- a single :class:`~quotafetch.models.GovernorConfig`
  JSON document, ``config.json`` inside the config directory unless an
  explicit path is given.
* **Precedence** -- environment variables override the file, which
  overrides model defaults.  See :func:`load_config`.
* **Credential resolution** -- :func:`resolve_credential` reads the bearer
  token from an env var or a file.

File writes use a temp-file-then-rename strategy (:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from quotafetch.exceptions import ConfigError
from quotafetch.models import GovernorConfig

_APP_NAME = "quotafetch"
_CONFIG_FILENAME = "config.json"

# env var -> (section, field)
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str]] = {
    "QUOTAFETCH_TOKEN_SOURCE": (None, "token_source"),
    "QUOTAFETCH_BASE_URL": ("request", "base_url"),
    "QUOTAFETCH_CACHE_TTL": ("cache", "ttl_seconds"),
    "QUOTAFETCH_PACING_INTERVAL": ("pacing", "pacing_interval"),
    "QUOTAFETCH_RATE_LIMIT_WINDOW": ("pacing", "rate_limit_window"),
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/quotafetch/`` (default ``~/.config/quotafetch/``).
    On macOS/Windows: ``~/.quotafetch/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _config_path(path: Optional[str | Path]) -> Path:
    if path is not None:
        return Path(path).expanduser()
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  On any failure
    the temp file is removed.
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
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
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


# --- Load / save ---


def load_config(path: Optional[str | Path] = None) -> GovernorConfig:
    """Load the governor configuration.

    Precedence (high to low):
        1. Environment variables (``QUOTAFETCH_TOKEN_SOURCE``,
           ``QUOTAFETCH_BASE_URL``, ``QUOTAFETCH_CACHE_TTL``,
           ``QUOTAFETCH_PACING_INTERVAL``, ``QUOTAFETCH_RATE_LIMIT_WINDOW``)
        2. The JSON config file (*path*, or ``config.json`` in
           :func:`get_config_dir`)
        3. Model defaults

    Args:
        path: Explicit config file path.  A missing file is not an error.

    Returns:
        The validated :class:`~quotafetch.models.GovernorConfig`.

    Raises:
        ConfigError: If the file is unreadable, is not valid JSON, or the
            merged values fail validation.
    """
    config_path = _config_path(path)
    data: dict[str, Any] = {}
    if config_path.is_file():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Invalid config at {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config at {config_path}: expected a JSON object")

    for var, (section, field) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        if section is None:
            data[field] = value
        else:
            data.setdefault(section, {})[field] = value

    try:
        return GovernorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {config_path}: {exc}") from exc


def save_config(config: GovernorConfig, path: Optional[str | Path] = None) -> Path:
    """Persist *config* atomically and return the path written."""
    config_path = _config_path(path)
    data = config.model_dump(mode="json")
    _atomic_write(config_path, json.dumps(data, indent=2) + "\n")
    return config_path


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigError(f"Unknown credential source format: {source}")
