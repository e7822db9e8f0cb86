"""
Configuration Loader

Reads the service's YAML settings files, expanding environment variables.
"""

import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml


class ConfigLoader:
    """
    Loads service settings from YAML files with environment variable support.

    Features:
    - Environment variable substitution: ${VAR_NAME}
    - Default values: ${VAR_NAME:default}
    - Includes: !include other_file.yaml
    - Layered files (later files override earlier ones)

    Example:
        ```python
        loader = ConfigLoader()
        data = loader.load_yaml("tenantconf.yaml")

        data = loader.load_multiple(["default.yaml", "local.yaml"])
        ```
    """

    ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path) if base_path else Path.cwd()

    def load_yaml(self, path: str) -> dict[str, Any]:
        """
        Load a YAML settings file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        file_path = self._resolve_path(path)

        if not file_path.exists():
            raise FileNotFoundError(f"Settings file not found: {file_path}")

        content = file_path.read_text(encoding="utf-8")
        data = yaml.safe_load(self._substitute_env_vars(content)) or {}

        return self._process_includes(data, file_path.parent)

    def load_multiple(self, paths: list[str]) -> dict[str, Any]:
        """Load and deep-merge several files, skipping the ones that are missing."""
        merged: dict[str, Any] = {}

        for path in paths:
            try:
                merged = self._deep_merge(merged, self.load_yaml(path))
            except FileNotFoundError:
                continue

        return merged

    def _resolve_path(self, path: str) -> Path:
        p = Path(path)
        if p.is_absolute():
            return p
        return self.base_path / p

    def _substitute_env_vars(self, content: str) -> str:
        """
        Replace ${VAR} and ${VAR:default} with values from the environment.

        Unset variables without a default become empty strings.
        """
        def replace(match: re.Match) -> str:
            value = os.getenv(match.group(1))
            if value is not None:
                return value
            return match.group(2) if match.group(2) is not None else ""

        return self.ENV_PATTERN.sub(replace, content)

    def _process_includes(self, data: Any, base_dir: Path) -> Any:
        """Resolve `!include file.yaml` string values relative to base_dir."""
        if not isinstance(data, dict):
            return data

        result = {}
        for key, value in data.items():
            if isinstance(value, str) and value.startswith("!include "):
                include_path = base_dir / value[len("!include "):].strip()
                if include_path.exists():
                    content = include_path.read_text(encoding="utf-8")
                    result[key] = yaml.safe_load(self._substitute_env_vars(content))
                else:
                    result[key] = None
            elif isinstance(value, dict):
                result[key] = self._process_includes(value, base_dir)
            else:
                result[key] = value

        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def validate_config(self, config: dict[str, Any]) -> list[str]:
        """
        Validate raw settings and return a list of issues.

        Args:
            config: Settings dictionary as loaded from YAML

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        storage = config.get("storage") or {}
        if not isinstance(storage, dict):
            return ["'storage' must be a mapping"]

        if str(storage.get("use_dynamodb", "false")).lower() in ("true", "1", "yes"):
            dynamo = storage.get("dynamodb") or {}
            if not (dynamo.get("table_name") or os.getenv("DYNAMODB_TABLE_NAME")):
                errors.append("DynamoDB table name not configured")
        else:
            path = storage.get("config_file_path")
            if path and not self._resolve_path(str(path)).exists():
                errors.append(f"Configuration file not found: {path}")

        return errors
