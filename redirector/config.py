# redirector/config.py

import logging
import re

from pydantic import field_validator
from pydantic_settings import BaseSettings

from redirector.classifier import (
    ANDROID_VERSION_PATTERN,
    IOS_VERSION_PATTERN,
    MOBILE_BROWSER_PATTERN,
    Thresholds,
    VersionPatterns,
)


class ConfigurationError(ValueError):
    """Invalid process configuration, fatal at startup"""


class Settings(BaseSettings):
    # Version thresholds
    min_ios_version: float = 8.0
    min_android_version: float = 5.0

    # Require a mobile browser signature in the UA for Android redirects
    android_strict: bool = True

    # Store listings
    app_store_url: str = "https://itunes.apple.com/us/app/appname"
    play_store_url: str = "https://play.google.com/store/apps/details?id=xxx.xxx.xxx"

    # Fallback page
    fallback_title: str = "Get the app"

    # Version extraction patterns (one capturing group around the version)
    ios_version_pattern: str = IOS_VERSION_PATTERN
    android_version_pattern: str = ANDROID_VERSION_PATTERN
    mobile_browser_pattern: str = MOBILE_BROWSER_PATTERN

    # Server
    host: str = "0.0.0.0"
    port: int = 8001
    debug_enabled: bool = True
    log_level: str = "INFO"

    @field_validator("min_ios_version", "min_android_version")
    @classmethod
    def non_negative_version(cls, value: float) -> float:
        if value < 0:
            raise ValueError("minimum version must not be negative")
        return value

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("ios_version_pattern", "android_version_pattern", "mobile_browser_pattern")
    @classmethod
    def valid_pattern(cls, value: str) -> str:
        try:
            compiled = re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        if compiled.groups < 1:
            raise ValueError("pattern needs a capturing group around the version")
        return value

    def thresholds(self) -> Thresholds:
        return Thresholds(
            min_ios_version=self.min_ios_version,
            min_android_version=self.min_android_version,
            android_strict_mode=self.android_strict,
        )

    def version_patterns(self) -> VersionPatterns:
        try:
            return VersionPatterns.compile(
                ios=self.ios_version_pattern,
                android=self.android_version_pattern,
                mobile_browser=self.mobile_browser_pattern,
            )
        except re.error as e:
            raise ConfigurationError(f"Invalid version pattern: {e}") from e

    class Config:
        env_file = ".env"
        env_prefix = "REDIRECT_"


settings = Settings()
