"""
Configuration Management for SignalDesk

Loads configuration from ~/.signaldesk/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("signaldesk.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".signaldesk"
CONFIG_PATH = CONFIG_DIR / "config.json"
DATA_DIR = CONFIG_DIR / "data"

SESSION_KEY = "signaldesk:sessions:v1"
REVIEWER_KEY = "signaldesk:reviewers:v1"


@dataclass
class StorageConfig:
    """Where the file-backed session and reviewer stores live"""
    data_dir: str = str(DATA_DIR)
    sessions_file: str = "sessions.json"
    reviewers_file: str = "reviewers.json"

    @property
    def sessions_path(self) -> Path:
        return Path(self.data_dir) / self.sessions_file

    @property
    def reviewers_path(self) -> Path:
        return Path(self.data_dir) / self.reviewers_file


@dataclass
class IntakeConfig:
    """Intake validation limits"""
    max_chars: int = 5000
    session_cap: int = 20


@dataclass
class ExportConfig:
    """Export artifact settings"""
    title: str = "SignalDesk Intelligence Pack"


@dataclass
class ServerConfig:
    """HTTP service settings"""
    host: str = "127.0.0.1"
    port: int = 8088


@dataclass
class SignalDeskConfig:
    """Main SignalDesk configuration"""
    storage: StorageConfig = field(default_factory=StorageConfig)
    intake: IntakeConfig = field(default_factory=IntakeConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _parse_storage_config(data: dict) -> StorageConfig:
    """Parse storage section from config dict"""
    storage_data = data.get("storage", {})
    return StorageConfig(
        data_dir=storage_data.get("data_dir", str(DATA_DIR)),
        sessions_file=storage_data.get("sessions_file", "sessions.json"),
        reviewers_file=storage_data.get("reviewers_file", "reviewers.json"),
    )


def _parse_intake_config(data: dict) -> IntakeConfig:
    """Parse intake section from config dict"""
    intake_data = data.get("intake", {})
    return IntakeConfig(
        max_chars=intake_data.get("max_chars", 5000),
        session_cap=intake_data.get("session_cap", 20),
    )


def _parse_export_config(data: dict) -> ExportConfig:
    """Parse export section from config dict"""
    export_data = data.get("export", {})
    return ExportConfig(
        title=export_data.get("title", "SignalDesk Intelligence Pack"),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=server_data.get("port", 8088),
    )


def load_config() -> SignalDeskConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.signaldesk/config.json)
    3. Default values
    """
    config = SignalDeskConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.storage = _parse_storage_config(data)
            config.intake = _parse_intake_config(data)
            config.export = _parse_export_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError, AttributeError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("SIGNALDESK_DATA_DIR"):
        config.storage.data_dir = os.getenv("SIGNALDESK_DATA_DIR")
    if os.getenv("SIGNALDESK_MAX_INTAKE_CHARS"):
        config.intake.max_chars = int(os.getenv("SIGNALDESK_MAX_INTAKE_CHARS"))
    if os.getenv("SIGNALDESK_SESSION_CAP"):
        config.intake.session_cap = int(os.getenv("SIGNALDESK_SESSION_CAP"))
    if os.getenv("SIGNALDESK_EXPORT_TITLE"):
        config.export.title = os.getenv("SIGNALDESK_EXPORT_TITLE")
    if os.getenv("SIGNALDESK_HOST"):
        config.server.host = os.getenv("SIGNALDESK_HOST")
    if os.getenv("SIGNALDESK_PORT"):
        config.server.port = int(os.getenv("SIGNALDESK_PORT"))

    return config


def save_config(config: SignalDeskConfig) -> None:
    """Save configuration to file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    data = {
        "storage": {
            "data_dir": config.storage.data_dir,
            "sessions_file": config.storage.sessions_file,
            "reviewers_file": config.storage.reviewers_file,
        },
        "intake": {
            "max_chars": config.intake.max_chars,
            "session_cap": config.intake.session_cap,
        },
        "export": {
            "title": config.export.title,
        },
        "server": {
            "host": config.server.host,
            "port": config.server.port,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)


def ensure_directories(config: SignalDeskConfig) -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    Path(config.storage.data_dir).mkdir(parents=True, exist_ok=True)
