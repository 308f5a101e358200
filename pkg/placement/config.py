# Placement tracker — configuration
# Override storage and server settings via config/tracker.yaml or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "tracker.yaml"

BACKENDS = ("sqlite", "memory")


class ConfigError(Exception):
    """Raised when configuration is invalid."""
    pass


@dataclass
class Config:
    """Runtime configuration for the tracker and its board server."""

    # Storage
    storage_backend: str = "sqlite"
    db_path: str = "~/.local/share/placement-tracker/tracker.db"

    # Board server
    host: str = "127.0.0.1"
    port: int = 3000

    log_level: str = "INFO"

    def resolve(self):
        """Apply env overrides, expand ~ and check the backend name."""
        env_db = os.environ.get("PLACEMENT_TRACKER_DB")
        if env_db:
            self.db_path = env_db
        self.db_path = str(Path(self.db_path).expanduser())
        if self.storage_backend not in BACKENDS:
            raise ConfigError(
                f"Unknown storage_backend '{self.storage_backend}'. "
                f"Available: {list(BACKENDS)}"
            )

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
            cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
        else:
            cfg = cls()
        cfg.resolve()
        return cfg
