# backend/backoffice/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/backoffice.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///backoffice.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # The identity provider in front of the API forwards the verified user id here
    IDENTITY_HEADER = os.environ.get("IDENTITY_HEADER", "X-User-Id")

    # Off by default: selling never moves stock, only transfers and adjustments do
    DEDUCT_STOCK_ON_DELIVERY = _env_bool("DEDUCT_STOCK_ON_DELIVERY", False)

    DEFAULT_LOW_STOCK_THRESHOLD = int(os.environ.get("DEFAULT_LOW_STOCK_THRESHOLD", "10"))

    TRACKING_PREFIX = os.environ.get("TRACKING_PREFIX", "MAG")

    # Used when a recovered cart references a product that is no longer in the catalog
    CART_FALLBACK_PRODUCT_NAME = os.environ.get("CART_FALLBACK_PRODUCT_NAME", "Ginger Shot Recovery")
    CART_FALLBACK_PRICE = int(os.environ.get("CART_FALLBACK_PRICE", "20000"))
    CART_FALLBACK_COST = int(os.environ.get("CART_FALLBACK_COST", "5000"))

    # Brand shown on receipts and customer WhatsApp messages
    BRAND_NAME = os.environ.get("BRAND_NAME", "Magira")

    # Browser front ends allowed to call the API (comma-separated)
    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ).split(",")
        if origin.strip()
    )
