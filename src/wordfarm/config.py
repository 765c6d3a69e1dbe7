"""Configuration settings for the word farm."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
EXPORT_DIR = Path(os.getenv("EXPORT_DIR", str(DATA_DIR / "exports")))

# Farm settings
MASTERY_THRESHOLD = 0.7  # accuracy a word needs to count as mastered
EXPORT_HEADER = "English,Chinese,Note/Archive"


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        EXPORT_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    data_dir: Path = DATA_DIR
    export_dir: Path = EXPORT_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///wordfarm.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SourceSettings:
    """Word source settings."""
    url: Optional[str] = os.getenv("WORD_SOURCE_URL")
    path: Optional[str] = os.getenv("WORD_SOURCE_PATH")
    timeout: float = float(os.getenv("WORD_SOURCE_TIMEOUT", "10"))


@dataclass
class FarmSettings:
    """Farm and assessment settings."""
    plot_count: int = int(os.getenv("PLOT_COUNT", "25"))
    batch_size: int = int(os.getenv("BATCH_SIZE", "10"))
    mastery_threshold: float = float(os.getenv("MASTERY_THRESHOLD", str(MASTERY_THRESHOLD)))
    review_min_attempts: int = int(os.getenv("REVIEW_MIN_ATTEMPTS", "3"))
    distractor_count: int = int(os.getenv("DISTRACTOR_COUNT", "3"))
    export_marker: str = os.getenv("EXPORT_MARKER", "ARCHIVED")
    export_header: str = EXPORT_HEADER


@dataclass
class MonitoringSettings:
    """Metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_source_settings() -> SourceSettings:
    """Get word source settings."""
    return SourceSettings()


def get_farm_settings() -> FarmSettings:
    """Get farm settings."""
    return FarmSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    source: SourceSettings = field(default_factory=get_source_settings)
    farm: FarmSettings = field(default_factory=get_farm_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.farm.plot_count < 1:
            raise ValueError("PLOT_COUNT must be positive")

        if self.farm.batch_size < 1:
            raise ValueError("BATCH_SIZE must be positive")

        if self.farm.mastery_threshold <= 0 or self.farm.mastery_threshold > 1:
            raise ValueError("MASTERY_THRESHOLD must be in (0, 1]")

        if self.farm.review_min_attempts < 1:
            raise ValueError("REVIEW_MIN_ATTEMPTS must be positive")

        if self.farm.distractor_count < 0:
            raise ValueError("DISTRACTOR_COUNT cannot be negative")

        if self.source.timeout <= 0:
            raise ValueError("WORD_SOURCE_TIMEOUT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
