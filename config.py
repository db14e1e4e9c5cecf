"""
Configuration management for the transformation service.

Loads environment variables from .env file and provides typed access to the
service-level settings. Engine settings (model, timeouts, probe timing) are
read by infra.config.InfraConfig.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)


class Config:
    """Configuration class for the transformation service."""

    # Service API Configuration
    AGENT_HOST = os.getenv("AGENT_HOST", "127.0.0.1")
    AGENT_PORT = int(os.getenv("AGENT_PORT", "8000"))

    # LLM Backend Configuration
    LLM_BACKEND = os.getenv("LLM_BACKEND", "ollama")
    OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")
    OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "gpt-oss:20b")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> bool:
        """Validate that the selected backend has what it needs."""
        if cls.LLM_BACKEND not in ("ollama", "stub"):
            logger.warning(f"Unknown LLM_BACKEND '{cls.LLM_BACKEND}' (expected ollama or stub)")
            return False

        if cls.LLM_BACKEND == "ollama":
            missing = [key for key in ("OLLAMA_BASE_URL", "OLLAMA_MODEL") if not getattr(cls, key)]
            if missing:
                logger.warning(
                    f"Missing required environment variables: {', '.join(missing)}; set them in .env"
                )
                return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Listen: {Config.AGENT_HOST}:{Config.AGENT_PORT}")
    print(f"  LLM Backend: {Config.LLM_BACKEND}")
    print(f"  Ollama: {Config.OLLAMA_BASE_URL} ({Config.OLLAMA_MODEL})")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
