"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any
from .models import LoginConfigs
from ..probe.flows import flow_for


class ConfigLoader:
    """Load and validate the targets file."""

    @staticmethod
    def load_from_file(config_path: str) -> LoginConfigs:
        """
        Load target configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            LoginConfigs: Validated, immutable configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
            ValueError: If the file is empty or a target lacks locators its flow needs
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f)

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration file must contain a 'targets' mapping: {config_path}")

        # Substitute environment variables
        raw_config = ConfigLoader._substitute_env_vars(raw_config)

        configs = LoginConfigs(**raw_config)

        # Flow-dependent locator checks need the flow's default set
        for config in configs.targets:
            flow_for(config.login_type).resolve_locators(config)

        return configs

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
