from dataclasses import dataclass, field
from typing import Optional
import yaml
from pathlib import Path

from core.exceptions import ConfigurationError
from core.hashing import DEFAULT_RESOLUTION, HashConfig


@dataclass
class HashingConfig:
    """Configuration for perceptual hashing"""
    resolution: int = DEFAULT_RESOLUTION
    use_dct: bool = True  # False selects the spatial gradient hash


@dataclass
class DetectorConfig:
    """Application-wide configuration"""
    n_workers: Optional[int] = None  # None: one per CPU
    use_threading: bool = True  # False: process pool
    show_progress: bool = False
    log_level: str = "WARNING"
    log_dir: Optional[str] = None

    # Hashing
    hashing: HashingConfig = field(default_factory=HashingConfig)

    def hash_config(self) -> HashConfig:
        """Validated, immutable hashing configuration for one run"""
        return HashConfig(resolution=self.hashing.resolution,
                          use_dct=self.hashing.use_dct)

    def save(self, path: str = "config.yaml"):
        """Save configuration to YAML file"""
        config_dict = {
            'n_workers': self.n_workers,
            'use_threading': self.use_threading,
            'show_progress': self.show_progress,
            'log_level': self.log_level,
            'log_dir': self.log_dir,
            'hashing': {
                'resolution': self.hashing.resolution,
                'use_dct': self.hashing.use_dct
            }
        }

        with open(path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    @classmethod
    def load(cls, path: str = "config.yaml") -> 'DetectorConfig':
        """Load configuration from YAML file"""
        if not Path(path).exists():
            return cls()  # Return default config

        with open(path, 'r') as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid config file {path}: {e}") from e

        config = cls()
        if config_dict is None:
            return config
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Invalid config file {path}: expected a mapping")

        # Load application settings
        config.n_workers = _checked(config_dict, 'n_workers', config.n_workers, (int, type(None)), path)
        config.use_threading = _checked(config_dict, 'use_threading', config.use_threading, bool, path)
        config.show_progress = _checked(config_dict, 'show_progress', config.show_progress, bool, path)
        config.log_level = _checked(config_dict, 'log_level', config.log_level, str, path)
        config.log_dir = _checked(config_dict, 'log_dir', config.log_dir, (str, type(None)), path)

        # Load hashing settings
        if 'hashing' in config_dict:
            hs = config_dict['hashing'] or {}
            if not isinstance(hs, dict):
                raise ConfigurationError(f"Invalid config file {path}: 'hashing' must be a mapping")
            config.hashing = HashingConfig(
                resolution=hs.get('resolution', config.hashing.resolution),
                use_dct=_checked(hs, 'use_dct', config.hashing.use_dct, bool, path)
            )

        return config


def _checked(section: dict, key: str, default, types, path: str):
    """Fetch key from section, rejecting values of the wrong type"""
    value = section.get(key, default)
    if not isinstance(types, tuple):
        types = (types,)
    # bool is an int subclass; only accept it where bool is asked for
    if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
        raise ConfigurationError(f"Invalid config file {path}: '{key}' has invalid value {value!r}")
    return value
