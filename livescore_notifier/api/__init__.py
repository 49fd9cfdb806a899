"""HTTP surface: cron trigger, scoreboard read path and admin endpoints"""
from typing import Optional
from flask import Flask, current_app, jsonify

from ..errors import SettingsError
from ..utils.logger import setup_logger

logger = setup_logger(__name__)

EXTENSION_KEY = "livescore_notifier"


def create_app(components=None) -> Flask:
    """
    Build the Flask application

    Args:
        components: Prebuilt services; loaded from the environment when omitted
    """
    if components is None:
        from ..components import build_components
        from ..config import Config
        components = build_components(Config())

    flask_app = Flask(__name__)
    flask_app.extensions[EXTENSION_KEY] = components

    from .admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from .cron import cron
    flask_app.register_blueprint(cron, url_prefix='/api/cron')

    from .games import games
    flask_app.register_blueprint(games, url_prefix='/api')

    from .testing import testing
    flask_app.register_blueprint(testing, url_prefix='/api/test')

    @flask_app.errorhandler(SettingsError)
    def handle_settings_error(e):
        return jsonify({'error': str(e)}), 400

    return flask_app


def get_components():
    return current_app.extensions[EXTENSION_KEY]


def resolve_company_id(value: Optional[str]) -> str:
    """Use the requested company id, falling back to the configured default"""
    return (value or get_components().config.default_company_id or '').strip()


def no_cache(response):
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate, max-age=0'
    response.headers['Pragma'] = 'no-cache'
    response.headers['Expires'] = '0'
    return response
