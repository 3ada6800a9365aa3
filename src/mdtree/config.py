"""Application configuration loaded from the environment."""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

LOGGER = logging.getLogger(__name__)

# An auth token list containing this value opens the site to everybody.
PUBLIC_TOKEN = "public"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8134


def parse_listen(value: str) -> tuple[str, int]:
    """Split "host:port" (or ":port") into its parts."""
    host, sep, port_str = value.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid listen address '{value}': expected host:port")
    try:
        port = int(port_str)
    except ValueError as e:
        raise ValueError(f"Invalid listen address '{value}': bad port") from e
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return host.strip("[]") or DEFAULT_HOST, port


def _parse_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(slots=True)
class AppConfig:
    repo_dir: Path = Path(".")
    auth_tokens: frozenset[str] = field(default_factory=lambda: frozenset({PUBLIC_TOKEN}))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    reload_secret: str | None = None
    git_pull: bool = True

    def __post_init__(self) -> None:
        self.repo_dir = Path(self.repo_dir).expanduser()
        self.auth_tokens = frozenset(self.auth_tokens)
        if self.reload_secret is None:
            self.reload_secret = secrets.token_urlsafe(16)
            LOGGER.info("Generated temporary reload secret: %s", self.reload_secret)

    @property
    def is_public(self) -> bool:
        return PUBLIC_TOKEN in self.auth_tokens

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Load configuration from ``MDTREE_*`` environment variables.

        ``MDTREE_AUTH`` is required: a whitespace separated list of tokens, or
        ``public`` to disable the access check.
        """
        env = os.environ if environ is None else environ

        auth_tokens = frozenset(env.get("MDTREE_AUTH", "").split())
        if not auth_tokens:
            raise ValueError(f"MDTREE_AUTH missing; set tokens or '{PUBLIC_TOKEN}'")

        host, port = parse_listen(env.get("MDTREE_LISTEN", f"{DEFAULT_HOST}:{DEFAULT_PORT}"))

        return cls(
            repo_dir=Path(env.get("MDTREE_REPO") or "."),
            auth_tokens=auth_tokens,
            host=host,
            port=port,
            reload_secret=env.get("MDTREE_SECRET") or None,
            git_pull=_parse_bool(env.get("MDTREE_GIT_PULL", "true")),
        )
