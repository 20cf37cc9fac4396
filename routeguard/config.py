"""Config loading for routeguard.

Reads `.routeguard/config.yaml` (or `~/.routeguard/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. ROUTEGUARD_CONFIG environment variable (if set)
  3. `.routeguard/config.yaml` (working directory — for development)
  4. `~/.routeguard/config.yaml` (home directory — for deployments)

Environment variable overrides:
  ROUTEGUARD_PORT — overrides server.port (takes precedence over config file value)
  ROUTEGUARD_CONFIG — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from routeguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".routeguard/config.yaml",
    os.path.expanduser("~/.routeguard/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """Listener binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class GateConfig:
    """Response gate configuration.

    render_rejections: When True, rejected responses are rendered as
                       ``501 Request not whitelisted``. When False, rejections
                       propagate to the host's generic error handling (HTTP 500).
    """

    render_rejections: bool = True


@dataclass
class Config:
    """Root configuration object populated from .routeguard/config.yaml.

    All fields have safe defaults — routeguard can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    gate: GateConfig = field(default_factory=GateConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On a non-boolean gate.render_rejections value.
        """
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8080),
        )

        gate_raw = raw.get("gate") or {}
        render_rejections = gate_raw.get("render_rejections", True)
        if not isinstance(render_rejections, bool):
            msg = (
                f"CONFIG ERROR: Invalid gate.render_rejections: '{render_rejections}'. "
                "Expected true or false."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
        gate = GateConfig(render_rejections=render_rejections)

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            gate=gate,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate routeguard configuration.

    Search order:
      1. ``config_path`` argument
      2. ``ROUTEGUARD_CONFIG`` environment variable
      3. ``.routeguard/config.yaml``
      4. ``~/.routeguard/config.yaml``

    Returns:
        Config populated from the first file found, or defaults if none exists.

    Raises:
        SystemExit(1): On invalid YAML, a non-mapping document, a missing or
                       unsupported ``version`` field, or an invalid override.
    """
    search_paths: list[str] = []
    if config_path is not None:
        search_paths.append(config_path)
    env_path = os.environ.get("ROUTEGUARD_CONFIG")
    if env_path:
        search_paths.append(env_path)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "routeguard refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "SECURITY WARNING: routeguard is configured to bind on 0.0.0.0 (all interfaces). "
            "Recommended: use server.host: '127.0.0.1' behind a reverse proxy."
        )

    if not config.gate.render_rejections:
        logger.warning(
            "gate.render_rejections is false — rejected responses surface as HTTP 500"
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        render_rejections=config.gate.render_rejections,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Currently handles:
      ROUTEGUARD_PORT — overrides config.server.port (integer; raises SystemExit(1) if invalid)
    """
    env_port = os.environ.get("ROUTEGUARD_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: ROUTEGUARD_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
