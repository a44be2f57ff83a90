# aerofeeds/settings.py
"""
Library settings.

Values come from the environment, optionally seeded from a .env file.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
load_dotenv()


@dataclass
class Settings:
    """Runtime configuration."""

    # OpenAIP credentials (used when a client is built without an explicit key)
    openaip_api_key: Optional[str] = os.getenv("OPENAIP_API_KEY")

    # Identifying header sent with every outbound request
    user_agent: str = os.getenv("AEROFEEDS_USER_AGENT", "aerofeeds/1.0")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"


# Global settings instance
settings = Settings()
