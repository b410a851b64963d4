"""Configuration management utilities."""

import yaml
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedSeq
from pathlib import Path
from typing import Dict, Any, Optional, Union
from omegaconf import OmegaConf

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"

PRESET_CONFIGS = {
    "simulator": {
        "default": {
            "engine": "python",
            "seed": None,
            "backend": "numpy",
            "log_level": "INFO",
        },
        "reproducible": {
            "engine": "python",
            "seed": 1234,
            "backend": "numpy",
            "log_level": "INFO",
        },
        "fast": {
            "engine": "numba",
            "seed": None,
            "backend": "numpy",
            "log_level": "WARNING",
        },
    }
}


class ConfigManager:
    """Manage simulator configuration files and settings."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files
        """
        self.config_dir = Path(config_dir) if config_dir else Path("configs")
        self.yaml_saver = YAML()

    def load_config(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from file.

        Relative paths that do not exist from the working directory are looked
        up in ``config_dir``.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary
        """
        config_path = Path(config_path)
        if not config_path.is_absolute() and not config_path.exists():
            config_path = self.config_dir / config_path

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() not in ('.yaml', '.yml'):
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        return config if config is not None else {}

    def load_default_config(self) -> Dict[str, Any]:
        """Load the configuration shipped with the package."""
        return self.load_config(DEFAULT_CONFIG_PATH)

    def save_config(self, config: Dict[str, Any], config_path: Union[str, Path]) -> None:
        """Save configuration to file.

        Args:
            config: Configuration dictionary
            config_path: Path where to save configuration
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            self.yaml_saver.dump(force_flow_style_lists(dict(config)), f)

    def merge_configs(self, base_config: Dict, override_config: Dict) -> Dict:
        """Merge two configurations with override taking precedence.

        Args:
            base_config: Base configuration
            override_config: Override configuration

        Returns:
            Merged configuration
        """
        base_cfg = OmegaConf.create(base_config)
        override_cfg = OmegaConf.create(override_config)

        merged = OmegaConf.merge(base_cfg, override_cfg)
        return OmegaConf.to_container(merged, resolve=True)

    def get_preset_config(self, preset_name: str, config_type: str = "simulator") -> Dict[str, Any]:
        """Get a preset configuration.

        Args:
            preset_name: Name of the preset
            config_type: Type of configuration

        Returns:
            A copy of the preset configuration dictionary
        """
        if config_type not in PRESET_CONFIGS:
            raise ValueError(f"Unknown config type: {config_type}")

        if preset_name not in PRESET_CONFIGS[config_type]:
            raise ValueError(f"Unknown preset '{preset_name}' for config type '{config_type}'")

        return dict(PRESET_CONFIGS[config_type][preset_name])

    def list_presets(self, config_type: str = "simulator") -> list:
        """List available presets for a configuration type."""
        return list(PRESET_CONFIGS.get(config_type, {}))

    def validate_config(self, config: Dict[str, Any], config_type: str = "simulator") -> bool:
        """Validate a configuration dictionary.

        Args:
            config: Configuration to validate
            config_type: Type of configuration

        Returns:
            True if valid, False otherwise
        """
        validation_rules = {
            "simulator": {
                "required_keys": ["engine"],
                "allowed_values": {
                    "engine": ("python", "numba"),
                    "backend": ("numpy", "cupy"),
                    "log_level": ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
                },
            }
        }

        if config_type not in validation_rules:
            return True  # Unknown type, assume valid

        rules = validation_rules[config_type]

        for key in rules["required_keys"]:
            if key not in config:
                return False

        for key, allowed in rules["allowed_values"].items():
            if key in config and config[key] not in allowed:
                return False

        seed = config.get("seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            return False

        return True

    def create_run_config(self, base_config: Dict, overrides: Dict) -> Dict:
        """Create a run configuration by overriding a base configuration.

        Raises ``ValueError`` if the result does not validate.
        """
        merged = self.merge_configs(base_config, overrides)
        if not self.validate_config(merged):
            raise ValueError(f"Invalid simulator configuration: {merged}")
        return merged


def force_flow_style_lists(d):
    for key, value in d.items():
        if isinstance(value, list):
            d[key] = CommentedSeq(value)
            d[key].fa.set_flow_style()  # sets flow style / inline list
        elif isinstance(value, dict):
            force_flow_style_lists(value)
    return d
