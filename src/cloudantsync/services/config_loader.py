"""Configuration loader for cloudant-sync."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from cloudantsync.errors import SyncError


class ConfigLoader:
    """Loads YAML configuration files for accounts and CLI defaults."""

    SUPPORTED_KEYS = {
        "accounts",
        "databases",
        "all_databases",
        "endpoints",
        "password",
        "verbose",
        "log_file",
        "timeout",
        "max_workers",
        "report_file",
        "embed_credentials",
        "dry_run",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise SyncError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise SyncError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise SyncError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise SyncError(f"Unknown configuration keys: {unknown_list}")

        accounts = parsed.get("accounts", [])
        if not isinstance(accounts, list) or not all(isinstance(item, dict) for item in accounts):
            raise SyncError("'accounts' must be a list of mappings.")

        for key in ("databases", "endpoints"):
            value = parsed.get(key)
            if value is not None and not isinstance(value, list):
                raise SyncError(f"'{key}' must be a list.")

        return parsed
