"""
Best Researcher Award Application Form

A web form for submitting structured award nominations: researcher
details plus ten repeatable research-profile sections.

Enhanced with:
- CSRF protection
- Rate limiting
- Security headers
- Request logging
"""

import logging
import os
from datetime import datetime
from flask import Flask, request, g


def create_app(test_config=None):
    """Application factory pattern."""
    app = Flask(__name__, instance_relative_config=True)

    # Default configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production'),
        PERMANENT_SESSION_LIFETIME=3600,  # 1 hour

        # CSRF settings
        WTF_CSRF_ENABLED=True,
        WTF_CSRF_TIME_LIMIT=3600,  # 1 hour
        WTF_CSRF_SSL_STRICT=False,  # Disabled for development

        # Rate limiting settings
        RATELIMIT_ENABLED=os.environ.get('RATELIMIT_ENABLED', 'true').lower() == 'true',
        RATELIMIT_STORAGE_URI=os.environ.get('REDIS_URL', 'memory://'),
        RATELIMIT_STRATEGY='fixed-window',
        RATELIMIT_DEFAULT='100 per minute',
        RATELIMIT_HEADERS_ENABLED=True,

        # Display settings
        INSTITUTION_NAME=os.environ.get('INSTITUTION_NAME', 'Best Researcher Award'),
        DISPLAY_TIMEZONE=os.environ.get('DISPLAY_TIMEZONE', 'Asia/Riyadh'),

        LOG_LEVEL=os.environ.get('LOG_LEVEL', 'INFO'),
    )

    if test_config is None:
        # Load instance config if it exists
        app.config.from_pyfile('config.py', silent=True)
    else:
        # Load test config
        app.config.from_mapping(test_config)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Import and initialize security
    from award_form.security import init_security
    init_security(app)

    # Register blueprints
    from award_form.routes import main_bp, api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    # Request logging
    @app.before_request
    def before_request():
        """Log request start."""
        g.request_start_time = datetime.utcnow()

    @app.after_request
    def log_request(response):
        """Log request completion."""
        if hasattr(g, 'request_start_time'):
            duration = (datetime.utcnow() - g.request_start_time).total_seconds()
            app.logger.info(
                f'{request.method} {request.path} - {response.status_code} - {duration:.3f}s'
            )
        return response

    # Template globals
    @app.context_processor
    def inject_globals():
        return {
            'current_year': datetime.utcnow().year,
            'app_name': app.config['INSTITUTION_NAME']
        }

    return app
