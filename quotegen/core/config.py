"""
quotegen/core/config.py — Centralized Configuration

Single source of truth for directories and runtime settings. Nothing here is
read at import time: the app factory calls AppConfig.from_env() once and
hands the pieces to the modules that need them.

Data directory priority: QUOTEGEN_DATA_DIR env → <project>/data.
A directory that cannot be created or written to (read-only deploys,
serverless file systems) flips storage into no-op mode instead of failing.
"""

import os
import logging
from dataclasses import dataclass

from quotegen.core.numbers import parse_or_default

log = logging.getLogger("quotegen.config")

# ── Project Root ──────────────────────────────────────────────────────────────
_THIS_FILE = os.path.abspath(__file__)
PACKAGE_ROOT = os.path.dirname(os.path.dirname(_THIS_FILE))
PROJECT_ROOT = os.path.dirname(PACKAGE_ROOT)

DEFAULT_DATA_DIR = os.path.join(PROJECT_ROOT, "data")
DEFAULT_ASSETS_DIR = os.path.join(PACKAGE_ROOT, "assets")
DEFAULT_TAX_PERCENT = 15.0


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def check_writable(directory: str) -> bool:
    """Create directory if needed and check a file can be written there."""
    try:
        os.makedirs(directory, exist_ok=True)
        test_f = os.path.join(directory, ".write_test")
        with open(test_f, "w") as f:
            f.write("ok")
        os.remove(test_f)
        return True
    except OSError as e:
        log.warning("Data dir %s not writable (%s) — persistence disabled", directory, e)
        return False


@dataclass(frozen=True)
class StorageConfig:
    """Where the quotation list lives and whether it may be written."""
    data_dir: str
    filename: str = "quotations.json"
    writable: bool = True

    @property
    def path(self) -> str:
        return os.path.join(self.data_dir, self.filename)

    @classmethod
    def from_env(cls) -> "StorageConfig":
        data_dir = os.environ.get("QUOTEGEN_DATA_DIR", "") or DEFAULT_DATA_DIR
        if _env_flag("QUOTEGEN_READONLY"):
            return cls(data_dir=data_dir, writable=False)
        return cls(data_dir=data_dir, writable=check_writable(data_dir))


@dataclass(frozen=True)
class AppConfig:
    storage: StorageConfig
    assets_dir: str = DEFAULT_ASSETS_DIR
    default_tax_percent: float = DEFAULT_TAX_PERCENT
    secret_key: str = "elcorp-quotation-dev"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "AppConfig":
        port = int(parse_or_default(os.environ.get("PORT"), 3000))
        cfg = cls(
            storage=StorageConfig.from_env(),
            assets_dir=os.environ.get("QUOTEGEN_ASSETS_DIR", "") or DEFAULT_ASSETS_DIR,
            default_tax_percent=parse_or_default(
                os.environ.get("QUOTEGEN_DEFAULT_TAX"), DEFAULT_TAX_PERCENT),
            secret_key=os.environ.get("SECRET_KEY", "elcorp-quotation-dev"),
            port=port,
        )
        log.info("Config: data=%s (writable=%s) assets=%s default_tax=%s",
                 cfg.storage.path, cfg.storage.writable, cfg.assets_dir,
                 cfg.default_tax_percent)
        return cfg
