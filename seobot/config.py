import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_API_URL = os.getenv(
    "OPENAI_API_URL", "https://api.openai.com/v1/chat/completions"
)

SUGGEST_URL = "https://suggestqueries.google.com/complete/search"
SUGGEST_TIMEOUT = 5
ANALYZE_TIMEOUT = 10
AUDIT_TIMEOUT = 15


def get_openai_api_key() -> str:
    return os.getenv("OPENAI_API_KEY", "")


def get_twitter_credentials_file() -> Path:
    default = Path.home() / ".config" / "credentials" / "twitter-api.json"
    return Path(os.getenv("TWITTER_CREDENTIALS_FILE", str(default))).expanduser()


def get_export_dir() -> Path:
    default = Path.home() / "seobot-exports"
    return Path(os.getenv("EXPORT_DIR", str(default))).expanduser()
