# backend/cafepos/config.py
from __future__ import annotations
import os


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/cafepos.sqlite3 unless DATABASE_URL is set
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///cafepos.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "accumulate": checkout adds the paid amount to the table's running total.
    # "replace": checkout sets the running total to the paid amount.
    TABLE_SETTLEMENT_MODE = os.environ.get("TABLE_SETTLEMENT_MODE", "accumulate")

    CORS_ALLOWED_ORIGINS = _split_csv(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    ))

    STOCK_MOVEMENTS_LIMIT = int(os.environ.get("STOCK_MOVEMENTS_LIMIT", "50"))
    RECENT_PAYMENTS_LIMIT = int(os.environ.get("RECENT_PAYMENTS_LIMIT", "10"))

    # bcrypt cost factor; tests lower it to keep hashing fast
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
