"""Configuration management for baassist."""

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from baassist.core.logging import get_logger

logger = get_logger("baassist.config")

USER_CONFIG_PATH = Path.home() / ".baassist" / "config.yaml"
PROJECT_CONFIG_NAME = ".baassist.yaml"

BOUNDS_POLICIES = ("clamp", "reject", "pass")


class Config:
    """Configuration manager with hierarchy: CLI args > project config > user config > defaults."""

    def __init__(self):
        """Initialize configuration with default values."""
        self.provider: str = "auto"
        self.model: Optional[str] = None
        self.base_url: Optional[str] = None
        self.api_key: Optional[str] = None
        # Low temperature keeps completions parseable, not more creative.
        self.temperature: float = 0.1
        self.max_tokens: int = 4096
        self.top_p: float = 1.0
        self.timeout: int = 120
        self.max_retries: int = 2
        self.retry_initial_delay: float = 1.0
        self.retry_max_delay: float = 10.0
        self.circuit_failure_threshold: int = 5
        self.circuit_recovery_timeout: float = 60.0
        self.bounds_policy: str = "clamp"
        self.log_level: str = "INFO"
        self.json_logs: bool = False
        self.log_file: Optional[str] = None

    @classmethod
    def load(cls, cli_args: Optional[dict[str, Any]] = None, config_file: Optional[Path] = None) -> "Config":
        """
        Load configuration from hierarchy: CLI args > explicit file > project config > user config > defaults.

        Args:
            cli_args: Dictionary of CLI arguments to override config
            config_file: Optional explicit config file (YAML or JSON)

        Returns:
            Config instance with loaded values
        """
        config = cls()

        if USER_CONFIG_PATH.exists():
            config._load_file(USER_CONFIG_PATH)

        project_config_path = Path.cwd() / PROJECT_CONFIG_NAME
        if project_config_path.exists():
            config._load_file(project_config_path)

        if config_file is not None:
            config._load_file(Path(config_file))

        if cli_args:
            for key, value in cli_args.items():
                if value is not None and hasattr(config, key):
                    setattr(config, key, value)

        config.validate()
        return config

    def _load_file(self, config_path: Path) -> None:
        """Load configuration values from a YAML or JSON file."""
        content = config_path.read_text(encoding="utf-8")
        if config_path.suffix in [".yaml", ".yml"]:
            data = yaml.safe_load(content)
        elif config_path.suffix == ".json":
            data = json.loads(content)
        else:
            logger.warning(f"Ignoring config file with unknown format: {config_path}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file without a mapping at top level: {config_path}")
            return

        for key, value in data.items():
            if hasattr(self, key) and value is not None:
                setattr(self, key, value)
            else:
                logger.debug(f"Unknown config key '{key}' in {config_path}")

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ValueError: If a value is out of range
        """
        if self.bounds_policy not in BOUNDS_POLICIES:
            raise ValueError(
                f"bounds_policy must be one of {', '.join(BOUNDS_POLICIES)}, got '{self.bounds_policy}'"
            )
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "provider": self.provider,
            "model": self.model,
            "base_url": self.base_url,
            "api_key": self.api_key,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "retry_initial_delay": self.retry_initial_delay,
            "retry_max_delay": self.retry_max_delay,
            "circuit_failure_threshold": self.circuit_failure_threshold,
            "circuit_recovery_timeout": self.circuit_recovery_timeout,
            "bounds_policy": self.bounds_policy,
            "log_level": self.log_level,
            "json_logs": self.json_logs,
            "log_file": self.log_file,
        }

    def save(self, path: Path, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save config file
            format: Format to save as ('yaml' or 'json')
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: v for k, v in self.to_dict().items() if v is not None}

        if format == "yaml":
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(data, indent=2)

        path.write_text(content, encoding="utf-8")
