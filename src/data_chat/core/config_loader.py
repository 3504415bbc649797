"""Centralized configuration loader for YAML-based configuration.

This module provides functions to load configuration from YAML files with:
- Environment variable overrides (env var → YAML → defaults)
- Type coercion (string to float, bool, int)
- Schema validation using dataclasses
- Graceful degradation (missing files use defaults)

Secrets (GEMINI_API_KEY) are never read from YAML, only from the environment.
"""

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful data analysis assistant. You have access to two datasets: "
    "the H1 2025 and H2 2024 VMAXX survey responses with backend data. "
    "Focus on answering the question using the data available to you. "
    "When exact figures are provided as computed results, use them as-is and state that "
    "they were computed over the full dataset. "
    "Present the answer in a clear, organized, and non-code-formatted way."
)


def get_project_root() -> Path:
    """
    Get project root directory.

    Uses pattern: config_loader.py → core/ → data_chat/ → src/ → project_root

    Validates that the config/ directory exists to ensure correct project root detection.

    Returns:
        Path to project root directory

    Raises:
        ValueError: If config/ directory is not found at the detected project root
    """
    current_file = Path(__file__)
    project_root = current_file.parent.parent.parent.parent

    config_dir = project_root / "config"
    if not config_dir.is_dir():
        raise ValueError(
            f"Project root detection failed: config/ directory not found at {config_dir}. "
            f"Detected project root: {project_root}. "
            f"If project structure has changed, update get_project_root() in config_loader.py"
        )

    return project_root


def _coerce_type(value: Any, target_type: type) -> Any:
    """
    Coerce value to target type.

    Handles:
    - String "30.0" → float 30.0
    - String "true"/"false" → bool True/False (case-insensitive)
    - String "123" → int 123

    Args:
        value: Value to coerce
        target_type: Target type (float, bool, int, str)

    Returns:
        Coerced value

    Raises:
        ValueError: If coercion fails
    """
    if value is None:
        return None

    if isinstance(value, target_type) and not (target_type is int and isinstance(value, bool)):
        return value

    if target_type is bool:
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value)

    if target_type is float:
        return float(value)

    if target_type is int:
        if isinstance(value, str):
            return int(float(value))  # Handle "30.0" → 30
        return int(value)

    if target_type is str:
        return str(value)

    return value


def _is_critical_config(key: str) -> bool:
    """
    Check if a config key is critical (should raise ValueError on type coercion failure).

    Critical configs are generation parameters and timeouts, where a silently
    defaulted value would change model behaviour without notice.
    """
    critical_patterns = [
        "temperature",
        "top_p",
        "top_k",
        "timeout",
        "max_output_tokens",
    ]
    return any(pattern in key.lower() for pattern in critical_patterns)


def _apply_env_overrides(config: dict[str, Any], env_mapping: dict[str, str]) -> dict[str, Any]:
    """
    Apply environment variable overrides to config.

    Args:
        config: Configuration dictionary
        env_mapping: Mapping of env var names to config keys

    Returns:
        Config with env var overrides applied
    """
    result = config.copy()

    for env_key, config_key in env_mapping.items():
        env_value = os.getenv(env_key)
        if env_value is None or config_key not in result:
            continue
        target_type = type(result[config_key])
        try:
            result[config_key] = _coerce_type(env_value, target_type)
        except (ValueError, TypeError) as e:
            if _is_critical_config(config_key):
                raise ValueError(f"Invalid value for {env_key}={env_value!r}: expected {target_type.__name__}") from e
            logger.warning(f"Failed to coerce env var {env_key}={env_value} to {target_type.__name__}: {e}")

    return result


def _read_yaml(config_path: Path) -> dict[str, Any]:
    """Read a YAML mapping; missing file yields an empty dict."""
    if not config_path.exists():
        logger.debug(f"Config file not found at {config_path}, using defaults")
        return {}
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML in {config_path}: expected a mapping, got {type(data).__name__}")
    return data


@dataclass
class AppConfigDefaults:
    """Default values for application configuration."""

    gemini_model: str = "gemini-2.0-flash"
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    temperature: float = 0.5
    top_p: float = 0.95
    top_k: int = 40
    max_output_tokens: int = 8192
    response_mime_type: str = "text/plain"
    llm_timeout_seconds: float = 60.0
    file_poll_interval_seconds: float = 10.0
    sample_row_count: int = 20
    attach_source_files: bool = False  # Upload source CSVs to the Gemini file API for pass-through questions
    response_cache_max_size: int = 0  # 0 = never evict (process lifetime)
    session_store: str = "memory"  # "memory" or "file"
    session_store_path: str = "data/sessions"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    def to_dict(self) -> dict[str, Any]:
        """Convert dataclass to dictionary."""
        return asdict(self)


APP_ENV_MAPPING = {
    "GEMINI_MODEL": "gemini_model",
    "GEMINI_TEMPERATURE": "temperature",
    "GEMINI_TOP_P": "top_p",
    "GEMINI_TOP_K": "top_k",
    "GEMINI_MAX_OUTPUT_TOKENS": "max_output_tokens",
    "LLM_TIMEOUT_SECONDS": "llm_timeout_seconds",
    "FILE_POLL_INTERVAL_SECONDS": "file_poll_interval_seconds",
    "SAMPLE_ROW_COUNT": "sample_row_count",
    "ATTACH_SOURCE_FILES": "attach_source_files",
    "RESPONSE_CACHE_MAX_SIZE": "response_cache_max_size",
    "SESSION_STORE": "session_store",
    "SESSION_STORE_PATH": "session_store_path",
    "LOG_LEVEL": "log_level",
    "CORS_ORIGINS": "cors_origins",
}


def load_app_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load application config from YAML with env var overrides.

    Precedence: Environment variable → YAML value → Default value

    Args:
        config_path: Optional path to config file. If None, uses config/app.yaml.

    Returns:
        dict with keys matching AppConfigDefaults fields

    Raises:
        ValueError: If YAML is invalid or a critical value cannot be coerced
    """
    defaults = AppConfigDefaults().to_dict()

    if config_path is None:
        config_path = get_project_root() / "config" / "app.yaml"

    config = defaults.copy()
    for key, value in _read_yaml(Path(config_path)).items():
        if key not in defaults:
            logger.warning(f"Unknown config key {key} in {config_path}, ignoring")
            continue
        target_type = type(defaults[key])
        try:
            config[key] = _coerce_type(value, target_type)
        except (ValueError, TypeError) as e:
            if _is_critical_config(key):
                raise ValueError(
                    f"Type coercion failed for critical config {key}={value}: "
                    f"expected {target_type.__name__}, got {type(value).__name__}. "
                    f"Error: {e}"
                ) from e
            logger.warning(
                f"Failed to coerce YAML value {key}={value} to {target_type.__name__}: {e}, using default"
            )

    return _apply_env_overrides(config, APP_ENV_MAPPING)


def load_datasets_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load the dataset catalogue.

    Each entry needs a source_path; relative paths are resolved against the
    directory containing config/ (the project root).

    Args:
        config_path: Optional path to config file. If None, uses config/datasets.yaml.

    Returns:
        dataset_id -> {"display_name", "source_path" (Path), "period"}

    Raises:
        ValueError: If YAML is invalid or an entry has no source_path
    """
    if config_path is None:
        config_path = get_project_root() / "config" / "datasets.yaml"
    config_path = Path(config_path)
    base_dir = config_path.parent.parent

    raw = _read_yaml(config_path).get("datasets", {}) or {}
    datasets: dict[str, dict[str, Any]] = {}
    for dataset_id, entry in raw.items():
        if not isinstance(entry, dict) or not entry.get("source_path"):
            raise ValueError(f"Dataset '{dataset_id}' in {config_path} must define source_path")
        source_path = Path(entry["source_path"])
        if not source_path.is_absolute():
            source_path = base_dir / source_path
        datasets[dataset_id] = {
            "display_name": entry.get("display_name", dataset_id),
            "source_path": source_path,
            "period": entry.get("period"),
        }

    logger.info(f"Loaded {len(datasets)} dataset definitions from {config_path}")
    return datasets
