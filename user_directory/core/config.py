"""Application configuration pulled from environment variables."""

import logging
import os

from dotenv import load_dotenv

# --- Initial Environment Variable Load ---
load_dotenv()

# --- Endpoints ---
BASE_ENDPOINT = os.environ.get("BASE_ENDPOINT", "http://localhost:3001")
JSON_PLACEHOLDER_ENDPOINT = os.environ.get("JSON_PLACEHOLDER_ENDPOINT", "https://jsonplaceholder.typicode.com")
POSTAL_CODE_ENDPOINT = os.environ.get(
    "POSTAL_CODE_ENDPOINT",
    "https://public.opendatasoft.com/api/records/1.0/search/",
)
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", 10))

# --- Seeding ---
DB_PATH = os.environ.get("DB_PATH", "db.json")

# --- Server ---
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 8000))

# --- Comment synthesis tunables ---
SYNTH_MAX_DEPTH = int(os.environ.get("SYNTH_MAX_DEPTH", 4))
SYNTH_TARGET_AUTHOR_PROBABILITY = float(os.environ.get("SYNTH_TARGET_AUTHOR_PROBABILITY", 0.3))

# --- Logging ---
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for scripts and the server."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
