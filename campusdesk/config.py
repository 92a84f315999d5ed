"""
Configuration management for CampusDesk backend.
"""
import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Base paths
BASE_DIR = Path(__file__).parent.parent

# Load environment variables
load_dotenv(BASE_DIR / ".env")


def _env_flag(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# AI text-generation gateway (any OpenAI-compatible chat-completions endpoint)
AI_API_KEY = os.getenv("CAMPUSDESK_AI_API_KEY") or os.getenv("OPENAI_API_KEY", "")
AI_BASE_URL = os.getenv("CAMPUSDESK_AI_BASE_URL", "") or None
AI_MODEL = os.getenv("CAMPUSDESK_AI_MODEL", "gpt-4o-mini")
AI_TIMEOUT_SECONDS = float(os.getenv("CAMPUSDESK_AI_TIMEOUT", "60"))

# Authentication
JWT_SECRET = os.getenv("CAMPUSDESK_JWT_SECRET", "")
JWT_TTL_SECONDS = int(os.getenv("CAMPUSDESK_JWT_TTL", str(8 * 60 * 60)))
# Demo mode issues tokens for the seeded demo users (role switcher)
DEMO_MODE = _env_flag("CAMPUSDESK_DEMO_MODE", "1")

# Scheduled assignments are swept this often
AUTO_PUBLISH_INTERVAL_SECONDS = float(os.getenv("CAMPUSDESK_AUTO_PUBLISH_INTERVAL", "10"))

# Server configuration
HOST = os.getenv("CAMPUSDESK_HOST", "0.0.0.0")
PORT = int(os.getenv("CAMPUSDESK_PORT", "3000"))
DEBUG = _env_flag("CAMPUSDESK_DEBUG")

# Logging
LOG_LEVEL = logging.DEBUG if DEBUG else logging.INFO
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Config:
    """Application configuration class."""

    def __init__(self):
        self.ai_api_key = AI_API_KEY
        self.ai_base_url = AI_BASE_URL
        self.ai_model = AI_MODEL
        self.ai_timeout_seconds = AI_TIMEOUT_SECONDS
        self.jwt_secret = JWT_SECRET
        self.jwt_ttl_seconds = JWT_TTL_SECONDS
        self.demo_mode = DEMO_MODE
        self.auto_publish = True
        self.auto_publish_interval_seconds = AUTO_PUBLISH_INTERVAL_SECONDS
        self.seed_demo_data = True

    def to_dict(self):
        return {
            "ai_api_key": self.ai_api_key,
            "ai_base_url": self.ai_base_url,
            "ai_model": self.ai_model,
            "ai_timeout_seconds": self.ai_timeout_seconds,
            "jwt_secret": self.jwt_secret,
            "jwt_ttl_seconds": self.jwt_ttl_seconds,
            "demo_mode": self.demo_mode,
            "auto_publish": self.auto_publish,
            "auto_publish_interval_seconds": self.auto_publish_interval_seconds,
            "seed_demo_data": self.seed_demo_data,
        }

    def update(self, data: dict):
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)


# Global config instance
config = Config()
