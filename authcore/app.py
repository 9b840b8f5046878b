"""Application factory for the authcore service"""
import logging

from flask import Flask, jsonify

from authcore.config import config
from authcore.errors import StorageUnavailable
from authcore.extensions import db
from authcore.services.delivery import OutboxSender

logger = logging.getLogger(__name__)


def create_app(config_name='default', sender=None, **overrides):
    """Create and configure Flask application"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name]())
    app.config.update(overrides)

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    app.extensions['reset_token_sender'] = sender or OutboxSender()

    # Register blueprints
    from authcore.controllers.auth_controller import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')

    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        from authcore import models  # noqa: F401
        db.create_all()

    logger.info(f'authcore started with {config_name} configuration')
    return app


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logging.getLogger('authcore').setLevel(level)


def register_error_handlers(app):
    """Register error handlers"""
    @app.errorhandler(StorageUnavailable)
    def storage_unavailable(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'not_found', 'message': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'success': False, 'error': 'internal_error',
                        'message': 'An unexpected error occurred'}), 500
