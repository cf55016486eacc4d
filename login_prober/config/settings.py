"""Environment defaults for command line options."""

import os
from typing import Optional


class Settings:
    """Command line defaults read from ``LOGIN_PROBER_*`` environment variables."""

    PREFIX = "LOGIN_PROBER_"

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get environment variable value.

        Args:
            key: Variable name without the LOGIN_PROBER_ prefix
            default: Default value if not set or empty

        Returns:
            Environment value or the default
        """
        value = os.getenv(Settings.PREFIX + key)
        return value if value else default

    @staticmethod
    def get_int(key: str, default: int) -> int:
        """
        Get an integer environment variable.

        Raises:
            ValueError: If the variable is set but not an integer
        """
        value = Settings.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{Settings.PREFIX}{key} must be an integer, got {value!r}")

    @staticmethod
    def get_float(key: str, default: float) -> float:
        """
        Get a float environment variable.

        Raises:
            ValueError: If the variable is set but not a number
        """
        value = Settings.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"{Settings.PREFIX}{key} must be a number, got {value!r}")
