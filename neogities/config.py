"""Centralised settings for the neogities client.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from neogities import __version__

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Remote API
    # ------------------------------------------------------------------
    base_url: str = field(
        default_factory=lambda: os.environ.get("NEOCITIES_BASE_URL", "https://neocities.org")
    )
    # Only read by the CLI; library calls always take the key explicitly.
    api_key: str = field(
        default_factory=lambda: os.environ.get("NEOCITIES_API_KEY", "")
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("NEOCITIES_USER_AGENT", f"neogities/{__version__}")
    )

    # ------------------------------------------------------------------
    # Transfer limits
    # ------------------------------------------------------------------
    connect_timeout: float = field(
        default_factory=lambda: float(os.environ.get("NEOCITIES_CONNECT_TIMEOUT", "10.0"))
    )
    transfer_timeout: float = field(
        default_factory=lambda: float(os.environ.get("NEOCITIES_TRANSFER_TIMEOUT", "60.0"))
    )
    max_response_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("NEOCITIES_MAX_RESPONSE_BYTES", str(16 * 1024 * 1024))
        )
    )

    def endpoint(self, path: str) -> str:
        """Join *path* (e.g. ``"/api/info"``) onto the configured base URL."""
        return self.base_url.rstrip("/") + path


# Module-level singleton, import this everywhere:
#   from neogities.config import settings
settings = Settings()
