"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import os
from typing import List
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .security_validators import DEFAULT_MAX_MULTIPART_DEPTH, MAX_MULTIPART_DEPTH_CEILING


LOG_FORMATS = ("color", "plain", "json")


class ConfigurationError(ValueError):
    """Raised when a configuration value is present but unusable"""


@dataclass
class DecoderConfig:
    """Configuration for the decoding core"""
    max_multipart_depth: int = DEFAULT_MAX_MULTIPART_DEPTH
    # Empty means every charset Python has a codec for
    header_charsets: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    """Configuration for writing the rendered result"""
    sanitize_filenames: bool = True
    dir_mode: int = 0o755
    file_mode: int = 0o660


@dataclass
class SystemConfig:
    """Configuration for system settings"""
    log_level: str = "WARNING"
    log_file: str = ""
    log_format: str = "color"


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Variables already set in the environment win over the file.

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.decoder = self._load_decoder_config()
        self.output = self._load_output_config()
        self.system = self._load_system_config()

    def _load_decoder_config(self) -> DecoderConfig:
        """Load decoding limits and charset policy"""
        return DecoderConfig(
            max_multipart_depth=self._get_int(
                "MAX_MULTIPART_DEPTH", DEFAULT_MAX_MULTIPART_DEPTH
            ),
            header_charsets=self._parse_list(os.getenv("HEADER_CHARSETS", "")),
        )

    def _load_output_config(self) -> OutputConfig:
        """Load output directory settings"""
        return OutputConfig(
            sanitize_filenames=self._get_bool("SANITIZE_FILENAMES", True),
            dir_mode=self._get_mode("OUTPUT_DIR_MODE", 0o755),
            file_mode=self._get_mode("OUTPUT_FILE_MODE", 0o660),
        )

    def _load_system_config(self) -> SystemConfig:
        """Load system configuration"""
        return SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
            log_file=os.getenv("LOG_FILE", ""),
            log_format=os.getenv("LOG_FORMAT", "color").strip().lower(),
        )

    @staticmethod
    def _parse_list(value: str) -> List[str]:
        """Split a comma or newline separated value into clean items"""
        return [
            item.strip()
            for item in value.replace("\n", ",").split(",")
            if item.strip()
        ]

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Convert environment variable to boolean"""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")

    @staticmethod
    def _get_mode(key: str, default: int) -> int:
        """Read a permission mode written in octal, e.g. 755 or 0o755"""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value.strip().lower().replace("0o", "", 1), 8)
        except ValueError:
            raise ConfigurationError(f"{key} must be an octal mode, got {value!r}")

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.decoder.max_multipart_depth < 1:
            raise ConfigurationError("MAX_MULTIPART_DEPTH must be at least 1")
        if self.decoder.max_multipart_depth > MAX_MULTIPART_DEPTH_CEILING:
            raise ConfigurationError(
                f"MAX_MULTIPART_DEPTH must be at most {MAX_MULTIPART_DEPTH_CEILING}"
            )

        for mode_name, mode in (("OUTPUT_DIR_MODE", self.output.dir_mode),
                                ("OUTPUT_FILE_MODE", self.output.file_mode)):
            if not 0 <= mode <= 0o7777:
                raise ConfigurationError(f"{mode_name} out of range: {oct(mode)}")

        if self.system.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}, "
                f"got {self.system.log_format!r}"
            )

        return True
