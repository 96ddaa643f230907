"""Configuration via environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

STORE_NAMESPACE = "quickReceipt_receipts"
MAX_IMAGE_EDGE = 1200
JPEG_QUALITY = 0.8
MONTHLY_BUDGET_THRESHOLD = 500


def get_store_path() -> Path:
    """Return the RECEIPT_STORE_PATH, defaulting to ./data.

    Always resolves to an absolute path to avoid issues if the
    working directory changes during execution.
    """
    return Path(os.environ.get("RECEIPT_STORE_PATH", "./data")).resolve()


def get_export_path() -> Path:
    """Return the RECEIPT_EXPORT_PATH, defaulting to the working directory."""
    return Path(os.environ.get("RECEIPT_EXPORT_PATH", ".")).resolve()


def get_anthropic_api_key() -> str:
    """Return the ANTHROPIC_API_KEY from the environment."""
    key = os.environ.get("ANTHROPIC_API_KEY")
    if not key:
        msg = "ANTHROPIC_API_KEY environment variable is required"
        raise ValueError(msg)
    return key


def get_llm_model() -> str:
    """Return the LLM model identifier.

    Defaults to claude-haiku-4-5-20251001.
    """
    return os.environ.get("LLM_MODEL", "claude-haiku-4-5-20251001")
