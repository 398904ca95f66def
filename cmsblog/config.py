from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env if present
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


class Config:
    SECRET_KEY: str = os.getenv("SECRET_KEY", os.urandom(32).hex())

    SITE_NAME = os.getenv("SITE_NAME", "spacetraveling")

    # Headless CMS (Prismic REST API v2)
    PRISMIC_API_ENDPOINT: str = os.getenv("PRISMIC_API_ENDPOINT", "https://spacetraveling.cdn.prismic.io/api/v2")
    # Read from environment and then unset so it never leaks into subprocesses
    PRISMIC_ACCESS_TOKEN: str | None = os.environ.pop("PRISMIC_ACCESS_TOKEN", None)
    CMS_POST_TYPE: str = os.getenv("CMS_POST_TYPE", "posts")
    CMS_TIMEOUT_SECONDS: float = float(os.getenv("CMS_TIMEOUT_SECONDS", "10"))
    CMS_REF_CACHE_SECONDS: int = int(os.getenv("CMS_REF_CACHE_SECONDS", "60"))
    # Extra hosts allowed besides the API endpoint host (e.g. the non-CDN host)
    CMS_ALLOWED_DOMAINS: list[str] = _env_list("CMS_ALLOWED_DOMAINS")
    CMS_BLOCK_PRIVATE_NETWORKS: bool = _env_bool("CMS_BLOCK_PRIVATE_NETWORKS", True)

    # Listing
    POSTS_PAGE_SIZE: int = int(os.getenv("POSTS_PAGE_SIZE", "1"))
    POSTS_ORDERING: str | None = os.getenv("POSTS_ORDERING", "[document.first_publication_date desc]") or None
    POST_PATHS_PAGE_SIZE: int = int(os.getenv("POST_PATHS_PAGE_SIZE", "100"))

    # Presentation
    DATE_LOCALE: str = os.getenv("DATE_LOCALE", "pt_BR")
    DATE_FORMAT: str = os.getenv("DATE_FORMAT", "dd MMM yyyy")
    WORDS_PER_MINUTE: int = int(os.getenv("WORDS_PER_MINUTE", "200"))

    # Static export
    STATIC_EXPORT_DIR: str = os.getenv("STATIC_EXPORT_DIR", "dist")

    # Caching (simple for dev)
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Security headers
    # Use {nonce} placeholder for per-request nonce substitution in cmsblog.security.apply_security_headers
    SECURITY_CSP = (
        "default-src 'self'; "
        "script-src 'nonce-{nonce}' 'strict-dynamic' ;"
        "style-src 'self'; "
        # Banners and inline images are served by the CMS image CDN
        "img-src 'self' https://images.prismic.io https://*.cdn.prismic.io; "
        # Exported static pages fetch the next listing page straight from the CMS
        "connect-src 'self' https://*.cdn.prismic.io https://*.prismic.io; "
        "font-src 'self'; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'"
    )
    SECURITY_HSTS_SECONDS = 31536000

    SECURITY_PERMISSIONS_POLICY = (
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=(), ambient-light-sensor=(), "
        "autoplay=(), encrypted-media=(), fullscreen=(), midi=(), "
        "picture-in-picture=(), sync-xhr=(), web-share=()"
    )

    # Flask env
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"
