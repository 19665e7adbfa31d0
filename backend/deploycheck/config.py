"""
Application configuration using environment variables.
"""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load .env file
load_dotenv()

@dataclass
class Settings:
    """Runtime settings for a validation run."""
    APP_NAME: str = "Deployment Readiness Validator"
    PROJECT_NAME: str = os.getenv("DEPLOYCHECK_PROJECT", "stylze")

    # Paths
    ROOT: str = os.getenv("DEPLOYCHECK_ROOT", ".")
    TARGETS_FILE: Optional[str] = os.getenv("DEPLOYCHECK_TARGETS") or None
    PRODUCTION_CONFIG_PATH: str = os.getenv("DEPLOYCHECK_PRODUCTION_CONFIG", ".env.production")

    # Network
    HOST: str = os.getenv("DEPLOYCHECK_HOST", "localhost")

    # Timeouts (seconds)
    PROBE_TIMEOUT: float = float(os.getenv("DEPLOYCHECK_PROBE_TIMEOUT", "5"))
    HTTP_TIMEOUT: float = float(os.getenv("DEPLOYCHECK_HTTP_TIMEOUT", "2"))
    COMMAND_TIMEOUT: float = float(os.getenv("DEPLOYCHECK_COMMAND_TIMEOUT", "5"))

    # Logging
    LOG_LEVEL: str = os.getenv("DEPLOYCHECK_LOG_LEVEL", "INFO").upper()

settings = Settings()
