# finance_tracker/middleware.py

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.datastructures import MutableHeaders

from .config import Config

limiter = Limiter(
    key_func=get_remote_address,
    application_limits=[Config.RATE_LIMIT],
    enabled=Config.RATE_LIMIT_ENABLED,
)


def security_headers(config=Config):
    headers = {
        "Content-Security-Policy": config.CONTENT_SECURITY_POLICY,
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
        "Origin-Agent-Cluster": "?1",
        "Referrer-Policy": "no-referrer",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Frame-Options": "SAMEORIGIN",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }
    if config.HSTS_MAX_AGE:
        headers["Strict-Transport-Security"] = f"max-age={config.HSTS_MAX_AGE}; includeSubDomains"
    return headers


class SecurityHeadersMiddleware:
    """Adds the hardening headers to every HTTP response the app sends."""

    def __init__(self, app, headers=None):
        self.app = app
        self.headers = headers if headers is not None else security_headers()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    response_headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)
