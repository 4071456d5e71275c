"""Configuration management for the order runner.

All configuration is loaded from environment variables with sensible defaults.
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Centralized configuration management."""

    # Security Configuration
    API_KEYS: List[str] = [
        key.strip()
        for key in os.getenv("API_KEYS", "").split(",")
        if key.strip()
    ]

    # Browser Configuration
    HEADLESS_MODE: bool = os.getenv("HEADLESS_MODE", "false").lower() == "true"
    BROWSER_SLOW_MO: int = int(os.getenv("BROWSER_SLOW_MO", "0"))
    ORDER_PROFILE_DIR: str = os.getenv("ORDER_PROFILE_DIR", ".chrome-profile")
    ORDER_VIDEO_DIR: str = os.getenv("ORDER_VIDEO_DIR", "videos").strip()

    # Driver Configuration
    ORDER_TIMEOUT_MS: int = int(os.getenv("ORDER_TIMEOUT_MS", "30000"))
    ORDER_ACTION_RETRIES: int = int(os.getenv("ORDER_ACTION_RETRIES", "0"))
    ORDER_RETRY_DELAY_MS: int = int(os.getenv("ORDER_RETRY_DELAY_MS", "500"))

    # Input Configuration
    ORDER_PLAN_PATH: str = os.getenv("ORDER_PLAN_PATH", ".last-plan.json")
    ORDER_CONFIG_PATH: str = os.getenv(
        "ORDER_CONFIG_PATH", "merchant-configs/asaply-demo.json"
    )
    MERCHANT_CONFIG_DIR: str = os.getenv("MERCHANT_CONFIG_DIR", "merchant-configs")

    # LLM Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # API Configuration
    RUNNER_TIMEOUT_SEC: int = int(os.getenv("RUNNER_TIMEOUT_SEC", "180"))

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Application Configuration
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()

    @classmethod
    def validate(cls) -> None:
        """Validate values the runner cannot work without."""
        if cls.ORDER_TIMEOUT_MS <= 0:
            raise RuntimeError("ORDER_TIMEOUT_MS must be a positive number of milliseconds.")
        if cls.ORDER_ACTION_RETRIES < 0:
            raise RuntimeError("ORDER_ACTION_RETRIES cannot be negative.")

    @classmethod
    def validate_llm(cls) -> None:
        """Validate values required for plan generation."""
        if not cls.OPENAI_API_KEY:
            raise RuntimeError(
                "OPENAI_API_KEY is required. Set it in your environment or .env file."
            )


# Create a singleton instance
config = Config()
