"""
Security hardening module.

Provides CSRF protection for the form and the JSON API, per-route rate
limits and the response headers sent with every page, API answer and
receipt download.

Submitted values are not rewritten here: the record keeps them exactly as
typed and Jinja autoescaping protects the re-displayed form.
"""

from datetime import timedelta

from flask import current_app, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect


# Initialize extensions at module level
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"]
)


# Applied only where the app config does not set them
DEFAULT_CONFIG = {
    'SESSION_COOKIE_SECURE': True,
    'SESSION_COOKIE_HTTPONLY': True,
    'SESSION_COOKIE_SAMESITE': 'Lax',
    'PERMANENT_SESSION_LIFETIME': timedelta(hours=1),
    'WTF_CSRF_TIME_LIMIT': 3600,
    'WTF_CSRF_SSL_STRICT': True,
}


# Rate limit configurations
RATE_LIMITS = {
    'submit': "20 per minute",
    'api_submit': "10 per minute",
    'validate': "30 per minute",
    'sections': "60 per minute",
}


# Script and styles are served from /static; the add-entry button calls /api
SECURITY_HEADERS = {
    'Content-Security-Policy': (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self'; "
        "img-src 'self' data:; "
        "connect-src 'self'; "
        "form-action 'self'; "
        "frame-ancestors 'none';"
    ),
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'same-origin',
}

# Responses that may carry applicant details
NO_STORE_MIMETYPES = ('application/pdf', 'application/json')


def add_security_headers(response):
    """
    Add the configured security headers to a response.

    SECURITY_HEADERS in the app config replaces individual entries; a value
    of None drops that header.
    """
    headers = dict(SECURITY_HEADERS)
    headers.update(current_app.config.get('SECURITY_HEADERS') or {})
    for name, value in headers.items():
        if value is not None:
            response.headers[name] = value

    if response.mimetype in NO_STORE_MIMETYPES or request.method == 'POST':
        response.headers['Cache-Control'] = 'no-store'

    return response


def init_security(app):
    """Initialize CSRF protection, rate limiting and response headers."""
    for key, value in DEFAULT_CONFIG.items():
        app.config.setdefault(key, value)

    csrf.init_app(app)
    limiter.init_app(app)
    app.after_request(add_security_headers)


def get_client_ip() -> str:
    """Client address for log lines, honouring a reverse proxy."""
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        return forwarded_for.split(',')[0].strip()
    return request.headers.get('X-Real-Ip') or request.remote_addr or 'unknown'
