"""Configuration loader for the fellowship registration server"""

import os
from pathlib import Path

from dotenv import load_dotenv

project_dir = Path(__file__).parent.parent.parent
env_path = project_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL", "sqlite:///./fellowship.db"),
    "port": int(os.getenv("PORT", "5000")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    # Public site that renders /register/<formId>; used only to build form URLs
    "frontend_url": os.getenv("FRONTEND_URL", "http://localhost:3000"),
    "jwt_secret": os.getenv("JWT_SECRET"),
    "submission_rate_limit": os.getenv("SUBMISSION_RATE_LIMIT", "30/minute"),
    "rate_limit_enabled": os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",
    "environment": os.getenv("ENVIRONMENT", "development"),
}
