"""Configuration loading and validation."""

import os
import dataclasses
import yaml
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from avif_optimizer.domain.exceptions import ConfigurationError
from avif_optimizer.shared.logging import get_logger

logger = get_logger(__name__)

MAX_DIMENSION = 50000


@dataclass
class OptimizerConfig:
    """Configuration for an image optimization run."""

    # Resizing
    max_width: int = 1200
    max_height: int = 1200

    # Encoder
    quality: int = 60
    effort: int = 6

    # Input/Output
    output_dir: Optional[Path] = None  # same directory as input when unset
    preserve_original: bool = True
    preserve_exif: bool = False  # stripped by default for smaller files
    recursive: bool = False
    force: bool = False
    dry_run: bool = False
    exclude: List[str] = field(default_factory=list)

    # Batch execution
    concurrency: Optional[int] = None  # sized from workload when unset
    memory_per_item_mb: Optional[int] = None
    timeout_seconds: Optional[float] = None
    retries: int = 0

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not 1 <= self.quality <= 100:
            raise ConfigurationError(f"Quality must be between 1 and 100, got: {self.quality}")

        if not 1 <= self.effort <= 10:
            raise ConfigurationError(f"Effort must be between 1 and 10, got: {self.effort}")

        for name in ('max_width', 'max_height'):
            value = getattr(self, name)
            if not 1 <= value <= MAX_DIMENSION:
                raise ConfigurationError(f"{name} must be between 1 and {MAX_DIMENSION}, got: {value}")

        if self.concurrency is not None and self.concurrency < 1:
            raise ConfigurationError(f"Concurrency must be at least 1, got: {self.concurrency}")

        if self.memory_per_item_mb is not None and self.memory_per_item_mb <= 0:
            raise ConfigurationError(f"memory_per_item_mb must be positive, got: {self.memory_per_item_mb}")

        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError(f"Timeout must be positive, got: {self.timeout_seconds}")

        if self.retries < 0:
            raise ConfigurationError(f"Retries cannot be negative, got: {self.retries}")

    def replace(self, **changes) -> "OptimizerConfig":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data['output_dir'] = str(self.output_dir) if self.output_dir else None
        return data


class ConfigLoader:
    """Loads configuration from a YAML file, the environment and overrides."""

    # Environment variable -> (field, parser)
    ENV_VARS = {
        'AVIF_MAX_WIDTH': ('max_width', int),
        'AVIF_MAX_HEIGHT': ('max_height', int),
        'AVIF_QUALITY': ('quality', int),
        'AVIF_EFFORT': ('effort', int),
        'AVIF_OUTPUT_DIR': ('output_dir', Path),
        'AVIF_CONCURRENCY': ('concurrency', int),
        'AVIF_MEMORY_PER_ITEM_MB': ('memory_per_item_mb', int),
        'AVIF_TIMEOUT': ('timeout_seconds', float),
        'AVIF_RETRIES': ('retries', int),
        'AVIF_PRESERVE_EXIF': ('preserve_exif', None),
        'AVIF_RECURSIVE': ('recursive', None),
        'AVIF_FORCE': ('force', None),
    }

    def __init__(self, config_path: Optional[Path] = None, env_file: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
            env_file: Optional .env file, defaults to ``.env`` in the working directory
        """
        self.config_path = Path(config_path) if config_path else None
        self.env_file = Path(env_file) if env_file else Path('.env')
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> OptimizerConfig:
        """
        Load configuration from file and environment.

        Precedence, lowest to highest: defaults, YAML file, environment,
        ``overrides`` (CLI). ``None`` overrides are ignored.

        Returns:
            OptimizerConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            self._logger.info(f"Loading config from {self.config_path}")
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"Config file must contain a mapping: {self.config_path}")
            config_dict.update(yaml_config)

        config_dict.update(self._load_from_env())

        if overrides:
            config_dict.update({k: v for k, v in overrides.items() if v is not None})

        valid_fields = {f.name for f in dataclasses.fields(OptimizerConfig)}
        unknown = sorted(set(config_dict) - valid_fields)
        if unknown:
            self._logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return OptimizerConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables (and the .env file)."""
        if self.env_file.exists():
            load_dotenv(dotenv_path=self.env_file)

        env_config: Dict[str, Any] = {}
        for var, (name, parser) in self.ENV_VARS.items():
            raw = os.getenv(var)
            if raw is None or raw == '':
                continue
            if parser is None:
                env_config[name] = raw.lower() in ("true", "1", "yes")
                continue
            try:
                env_config[name] = parser(raw)
            except ValueError:
                self._logger.warning(f"Invalid {var} value: {raw}")

        if exclude := os.getenv('AVIF_EXCLUDE'):
            env_config['exclude'] = [p.strip() for p in exclude.split(',') if p.strip()]

        return env_config
