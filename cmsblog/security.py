from __future__ import annotations

from flask import current_app, g
from werkzeug.wrappers.response import Response


def apply_security_headers(response: Response) -> Response:
    # HSTS (only meaningful over HTTPS)
    hsts_seconds = current_app.config.get("SECURITY_HSTS_SECONDS", 31536000)
    response.headers.setdefault("Strict-Transport-Security", f"max-age={hsts_seconds}; includeSubDomains")

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("X-Frame-Options", "DENY")

    permissions_policy = current_app.config.get("SECURITY_PERMISSIONS_POLICY",
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), magnetometer=(), gyroscope=()")
    response.headers.setdefault("Permissions-Policy", permissions_policy)

    csp = current_app.config.get("SECURITY_CSP")
    if csp:
        # Substitute the {nonce} placeholder with the per-request nonce
        nonce = getattr(g, "script_nonce", None)
        csp_value = csp.replace("{nonce}", nonce) if "{nonce}" in csp and nonce else csp
        response.headers.setdefault("Content-Security-Policy", csp_value)

    return response
