"""
Configuration module for the DMARC report viewer.

Loads settings from environment variables with sensible defaults.
"""

import os


class Config:
    """Base configuration shared by all environments."""

    # Security
    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-change-me")

    # Session hardening
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = os.environ.get("SESSION_COOKIE_SECURE", "False").lower() == "true"

    # Upload / payload limits; the form overhead needs a little room
    # above the 1 MiB report cap enforced by the viewer.
    MAX_CONTENT_LENGTH: int = 2 * 1024 * 1024

    # CSRF protection (Flask-WTF)
    WTF_CSRF_ENABLED: bool = True

    # Report rendering
    DISPLAY_TIMEZONE: str = os.environ.get("DISPLAY_TIMEZONE", "UTC")
    DATE_FORMAT: str = os.environ.get("DATE_FORMAT", "%Y-%m-%d %H:%M")
    WARNING_COLOR: str = os.environ.get("WARNING_COLOR", "#e65100")
    SEPARATOR_COLOR: str = os.environ.get("SEPARATOR_COLOR", "#9e9e9e")
    SEPARATOR_STROKE: float = float(os.environ.get("SEPARATOR_STROKE", "1.0"))
    SMALL_TEXT_FACTOR: float = float(os.environ.get("SMALL_TEXT_FACTOR", "0.8"))

    # Source IP organization lookup: "none", "ip-api" or "cymru"
    ORG_LOOKUP: str = os.environ.get("ORG_LOOKUP", "none")
    ORG_LOOKUP_TIMEOUT: float = float(os.environ.get("ORG_LOOKUP_TIMEOUT", "5"))
    DNS_NAMESERVERS: str = os.environ.get("DNS_NAMESERVERS", "")
    DNS_RETRIES: int = int(os.environ.get("DNS_RETRIES", "2"))
