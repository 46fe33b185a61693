"""
Config system - Error handler configuration with layered sources.

Merge order (later overrides earlier):
1. Defaults
2. YAML config file
3. .env file
4. Environment variables (FAULTLINE_* prefix)
5. Manual overrides
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import os

from .codes import ErrorCategory, parse_mask


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

_TRUE = ("true", "yes", "y", "on", "1")
_FALSE = ("false", "no", "n", "off", "0", "")


@dataclass(frozen=True)
class ErrorHandlerConfig:
    """
    Settings for an ErrorHandler and its log output.

    Attributes:
        log_uncaught: Categories of runtime failures to log
        exception_classes: Names of uncaught exception classes to log
        convert_fatal_errors: Raise RECOVERABLE_ERROR / USER_ERROR as exceptions
        reporting: Categories that are reported at all
        error_message: Body of the middleware's 500 response
        logger_name: Name of the logger failures are written to
        log_level: Level for the log handler set up by configure_logging
        log_format: Format for the log handler
        log_file: Write log records to this file instead of stderr
    """
    log_uncaught: ErrorCategory = ErrorCategory(0)
    exception_classes: Tuple[str, ...] = ()
    convert_fatal_errors: bool = False
    reporting: ErrorCategory = ErrorCategory.ALL
    error_message: str = "Unexpected error"
    logger_name: str = "faultline"
    log_level: str = "WARNING"
    log_format: str = DEFAULT_LOG_FORMAT
    log_file: Optional[str] = None

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env_prefix: str = "FAULTLINE_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "ErrorHandlerConfig":
        """
        Load configuration from multiple sources.

        Args:
            path: YAML config file
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)
            environ: Environment to read (``os.environ`` if None)

        Returns:
            Validated ErrorHandlerConfig

        Raises:
            ConfigError: If a value is invalid
        """
        data: Dict[str, Any] = {}

        if path:
            data.update(_load_yaml_file(Path(path)))

        if env_file:
            data.update(_strip_prefix(_load_env_file(Path(env_file)), env_prefix))

        data.update(_strip_prefix(os.environ if environ is None else environ, env_prefix))

        if overrides:
            data.update(overrides)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorHandlerConfig":
        """Build config from raw values, coercing types."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for key, value in data.items():
            try:
                values[key] = _COERCE.get(key, _as_str)(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for '{key}': {e}") from e

        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "ErrorHandlerConfig":
        """Copy of this config with some values replaced (None values are ignored)."""
        merged = {k: v for k, v in overrides.items() if v is not None}
        if not merged:
            return self
        coerced = self.from_dict(merged)
        return replace(self, **{k: getattr(coerced, k) for k in merged})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ============================================================================
# Sources
# ============================================================================

def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load config from YAML file."""
    import yaml

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} should contain a mapping")

    section = data.get("faultline", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'faultline' section in {path} should be a mapping")

    return dict(section)


def _load_env_file(path: Path) -> Dict[str, str]:
    """Load variables from .env file."""
    from dotenv import dotenv_values

    if not path.exists():
        return {}

    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def _strip_prefix(environ, prefix: str) -> Dict[str, str]:
    return {
        key[len(prefix):].lower(): value
        for key, value in environ.items()
        if key.startswith(prefix)
    }


# ============================================================================
# Coercion
# ============================================================================

def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _as_names(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(v).strip() for v in value if str(v).strip())


def _as_mask(value: Any) -> ErrorCategory:
    if isinstance(value, (list, tuple)):
        value = ",".join(str(v) for v in value)
    return parse_mask(value)


def _as_str(value: Any) -> str:
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _as_level(value: Any) -> str:
    return str(value).strip().upper()


_COERCE = {
    "log_uncaught": _as_mask,
    "reporting": _as_mask,
    "exception_classes": _as_names,
    "convert_fatal_errors": _as_bool,
    "log_level": _as_level,
    "log_file": _as_optional_str,
}
