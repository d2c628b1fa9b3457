# backend/atelier/config.py
from __future__ import annotations
import os


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/atelier.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///atelier.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Size catalog shared by both stores; deployments may override it.
    VALID_SIZES = _env_list("VALID_SIZES", "38,40,42,44,46,48,50,52")

    # Card payments at the boutique carry VAT, expressed in basis points (500 = 5%)
    CARD_TAX_RATE_BPS = int(os.environ.get("CARD_TAX_RATE_BPS", "500"))

    # Stock entries below this quantity count as low stock on the dashboard
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "5"))
