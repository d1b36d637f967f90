import os
import uuid
from typing import Optional

from flask import Flask, g, request
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def create_app(config_name: Optional[str] = None) -> Flask:
    """Application factory pattern"""
    from config import config

    config_name = config_name or os.environ.get('FLASK_CONFIG', 'default')
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Initialize extensions
    from marketplace.extensions import csrf, limiter, socketio
    db.init_app(app)
    limiter.init_app(app)
    csrf.init_app(app)
    socketio.init_app(app, cors_allowed_origins="*")

    from marketplace.errors import register_error_handlers
    register_error_handlers(app)

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid.uuid4().hex[:12]

    @app.after_request
    def echo_request_id(response):
        response.headers['X-Request-ID'] = g.get('request_id', '-')
        return response

    # Register blueprints
    from marketplace.routes import api_bp, main_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    from marketplace.events import register_namespace
    register_namespace()

    from marketplace.cli import register_commands
    register_commands(app)

    # Create database tables
    from marketplace import models  # noqa: F401
    with app.app_context():
        db.create_all()

    return app
