from flask import Flask
from flask_cors import CORS

from stkbilling.celery_extension import init_celery
from stkbilling.config import config, MpesaSettings
from stkbilling.extensions import db, migrate, celery_app
from stkbilling.services import build_services, EXTENSION_KEY
from stkbilling.utils.logger import RequestLogger


def create_app(config_name='development', token_cache=None):
    """
    Application factory pattern

    Raises:
        ConfigurationError: a required setting is missing
    """
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Fails fast before anything is served
    settings = MpesaSettings.from_mapping(app.config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    init_celery(celery_app, app)
    CORS(app)
    RequestLogger(app)

    app.extensions[EXTENSION_KEY] = build_services(settings, token_cache=token_cache)

    # Register blueprints
    from stkbilling.api import register_blueprints
    register_blueprints(app)

    # Register tasks
    import stkbilling.tasks  # noqa: F401

    # Error handlers
    register_error_handlers(app)

    return app


def register_error_handlers(app):
    """Register error handlers"""
    from flask import jsonify
    from stkbilling.errors import AppError

    @app.errorhandler(AppError)
    def app_error(error):
        return jsonify({'success': False, 'error': error.error, 'message': error.message}), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Bad request', 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found', 'message': str(error)}), 404

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error', 'message': str(error)}), 500
