"""Pydantic configuration models for the login prober."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Tuple

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def _validate_http_url(v: str) -> str:
    if not v.startswith(('http://', 'https://')):
        raise ValueError('URL must start with http:// or https://')
    return v


class TargetConfig(BaseModel):
    """
    Login configuration for one monitored target.

    Locator fields accept any Playwright selector: CSS, or XPath written as
    ``//...`` or ``xpath=...``. Empty locators are filled from the login
    flow's defaults where the flow has them.
    """
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    target: str = Field(min_length=1)
    url: str
    logout_url: str

    # Locators
    expected_header_css_class: str = ""
    expected_text_css_class: str = ""
    login_css_class: str = ""
    username_xpath: str = ""
    password_xpath: str = ""
    totp_xpath: str = ""
    submit_css_class: str = ""
    logout_confirm_css_class: str = ""  # Federated flow only
    logout_done_css_class: str = ""  # Federated flow only

    # Secrets
    username: str
    password: str
    totp_seed: str = ""

    expected_text: str
    login_type: str = "form"
    timeout: Optional[float] = Field(default=None, gt=0)  # Seconds, overrides ProberSettings.timeout

    @field_validator('url', 'logout_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        return _validate_http_url(v)

    @field_validator('totp_seed')
    @classmethod
    def strip_totp_seed(cls, v: str) -> str:
        return v.strip()

    @property
    def has_totp(self) -> bool:
        """True when the second-factor branch should run."""
        return bool(self.totp_seed)


class LoginConfigs(BaseModel):
    """Root of the targets file."""
    model_config = ConfigDict(frozen=True)

    targets: Tuple[TargetConfig, ...] = ()

    @model_validator(mode='after')
    def unique_target_names(self) -> 'LoginConfigs':
        """Ensure every target name appears once."""
        seen = set()
        for config in self.targets:
            if config.target in seen:
                raise ValueError(f'Duplicate target name: {config.target}')
            seen.add(config.target)
        return self

    def find_target(self, name: str) -> Optional[TargetConfig]:
        """
        Find the given target in the login configs.

        Args:
            name: Target name from the probe request

        Returns:
            TargetConfig or None if the target is not configured
        """
        for config in self.targets:
            if config.target == name:
                return config
        return None


class ProberSettings(BaseModel):
    """Process-wide settings taken from the command line."""
    model_config = ConfigDict(frozen=True)

    config_path: str = "/etc/prometheus/login.yml"
    listen_ip: str = "127.0.0.1"
    listen_port: int = Field(default=9980, ge=1, le=65535)
    log_level: str = "INFO"
    timeout: float = Field(default=60.0, gt=0)  # Seconds per probe run, warmup included
    headless: bool = True

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {", ".join(LOG_LEVELS)}')
        return level
