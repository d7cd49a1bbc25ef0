"""
Configuration management for the Product Transactions API.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR: Path = Path(__file__).parent.parent

load_dotenv(BASE_DIR / ".env")


class Settings:
    """API server configuration."""

    # Paths
    BASE_DIR: Path = BASE_DIR
    DEFAULT_DB_PATH: str = str(BASE_DIR / "data" / "transactions.db")

    # Server
    API_TITLE: str = "Product Transactions API"
    API_DESCRIPTION: str = "Listing, search and monthly statistics over seeded product transactions"
    API_VERSION: str = "1.0.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))

    # CORS
    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    # Database (plain path or sqlite "file:" URI)
    DATABASE_URI: str = os.getenv("DATABASE_URI", DEFAULT_DB_PATH)
    DB_TIMEOUT: int = 30  # SQLite busy timeout in seconds

    # Remote product feed
    SOURCE_URL: str = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
    SOURCE_TIMEOUT: float = float(os.getenv("SOURCE_TIMEOUT", "30"))


settings = Settings()
