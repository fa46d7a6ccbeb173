"""
Configuration snapshot for an analysis run

Values come from an optional YAML/JSON file, then KUBE_DIAGNOSTICS_*
environment variables, then command line overrides. The resulting
AnalysisConfig is immutable and handed to each component at construction.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .exceptions import InvalidConfigurationError, ValidationError
from .validators import InputValidator

DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_LANGUAGE = "english"
DEFAULT_BACKEND = "noop"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "kube-diagnostics"

logger = logging.getLogger("kube_diagnostics.config")


@dataclass(frozen=True)
class AnalysisConfig:
    """Read-only settings observed by the analysis components"""

    namespace: str = ""
    filters: Tuple[str, ...] = ()
    active_filters: Tuple[str, ...] = ()
    custom_analyzers: Tuple[Dict[str, Any], ...] = ()
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    language: str = DEFAULT_LANGUAGE
    anonymize: bool = False
    explain: bool = False
    backend: str = DEFAULT_BACKEND
    backend_options: Dict[str, Any] = field(default_factory=dict)
    cache_enabled: bool = True
    cache_dir: Optional[str] = None
    with_doc: bool = False
    verbose: bool = False
    output: str = "text"

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """
        Return a copy with the given values replaced

        None values are ignored so unset command line flags keep the
        configured value.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        return ConfigLoader.from_mapping({**self.to_dict(), **values})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ConfigLoader:
    """Load configuration from YAML/JSON files with environment variable support"""

    ENV_PREFIX = "KUBE_DIAGNOSTICS_"

    ENV_MAPPING = {
        "NAMESPACE": "namespace",
        "FILTERS": "filters",
        "ACTIVE_FILTERS": "active_filters",
        "MAX_CONCURRENCY": "max_concurrency",
        "LANGUAGE": "language",
        "ANONYMIZE": "anonymize",
        "EXPLAIN": "explain",
        "BACKEND": "backend",
        "CACHE_ENABLED": "cache_enabled",
        "CACHE_DIR": "cache_dir",
        "WITH_DOC": "with_doc",
        "VERBOSE": "verbose",
        "OUTPUT": "output",
    }

    BOOLEAN_KEYS = {"anonymize", "explain", "cache_enabled", "with_doc", "verbose"}

    @classmethod
    def load(cls, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> AnalysisConfig:
        """
        Build a configuration snapshot

        Args:
            config_path: Optional .yaml/.yml/.json file
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Validated AnalysisConfig

        Raises:
            InvalidConfigurationError: If the file cannot be read or values are invalid
        """
        data: Dict[str, Any] = {}
        if config_path:
            data.update(cls._load_file(config_path))
        data.update(cls._load_from_env(os.environ if environ is None else environ))
        return cls.from_mapping(data)

    @staticmethod
    def _load_file(config_path: str) -> Dict[str, Any]:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise InvalidConfigurationError(f"Configuration file not found: {path}")

        try:
            content = path.read_text(encoding="utf-8")
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif path.suffix == ".json":
                data = json.loads(content)
            else:
                raise InvalidConfigurationError(f"Unsupported configuration format: {path.suffix}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise InvalidConfigurationError(f"Failed to read configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Configuration file {path} must contain a mapping")

        logger.debug(f"Loaded configuration from {path}")
        return {key.replace("-", "_"): value for key, value in data.items()}

    @classmethod
    def _load_from_env(cls, environ: Dict[str, str]) -> Dict[str, Any]:
        config = {}
        for suffix, config_key in cls.ENV_MAPPING.items():
            value = environ.get(cls.ENV_PREFIX + suffix)
            if value:
                if config_key in cls.BOOLEAN_KEYS:
                    config[config_key] = value.lower() in ("true", "1", "yes")
                else:
                    config[config_key] = value
        return config

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> AnalysisConfig:
        """
        Validate a raw mapping into an AnalysisConfig

        Raises:
            InvalidConfigurationError: If a value is invalid
        """
        known = {f.name for f in fields(AnalysisConfig)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")

        values = {k: v for k, v in data.items() if k in known}
        try:
            if "namespace" in values:
                values["namespace"] = InputValidator.validate_namespace(values["namespace"])
            for key in ("filters", "active_filters"):
                if key in values:
                    values[key] = tuple(InputValidator.validate_filter_names(values[key], key))
            if "custom_analyzers" in values:
                values["custom_analyzers"] = tuple(cls._validate_custom_analyzers(values["custom_analyzers"]))
            if "max_concurrency" in values:
                values["max_concurrency"] = InputValidator.validate_max_concurrency(values["max_concurrency"])
            if "output" in values:
                values["output"] = InputValidator.validate_output_mode(values["output"])
        except ValidationError as e:
            raise InvalidConfigurationError(str(e)) from e

        for key in cls.BOOLEAN_KEYS & set(values):
            values[key] = cls._as_bool(values[key])

        if "backend_options" in values and not isinstance(values["backend_options"], dict):
            raise InvalidConfigurationError("backend_options must be a mapping")
        if values.get("cache_dir") is not None:
            values["cache_dir"] = str(values["cache_dir"])

        return replace(AnalysisConfig(), **values)

    @staticmethod
    def _as_bool(value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    @staticmethod
    def _validate_custom_analyzers(entries: Any) -> List[Dict[str, Any]]:
        if entries is None:
            return []
        if not isinstance(entries, (list, tuple)):
            raise InvalidConfigurationError("custom_analyzers must be a list")

        validated = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name") or not entry.get("handler"):
                raise InvalidConfigurationError(
                    f"Custom analyzer entries need 'name' and 'handler' keys, got: {entry!r}"
                )
            if ":" not in str(entry["handler"]):
                raise InvalidConfigurationError(
                    f"Custom analyzer handler must look like 'package.module:function', got: {entry['handler']}"
                )
            validated.append(dict(entry))
        return validated
