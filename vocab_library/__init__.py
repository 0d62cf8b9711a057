from __future__ import annotations
import logging

from flask import Flask, jsonify

from .config import Config
from .errors import LibraryError
from .extensions import library
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__)

    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    setup_logging(app.config.get('LOG_LEVEL', 'INFO'))

    library.init_app(app)
    if app.config.get('LIBRARY_SEED_DEMO'):
        from .seed import seed_demo
        seed_demo(app.extensions['library'])

    @app.errorhandler(LibraryError)
    def _library_error(err: LibraryError):
        logger.warning('%s: %s', err.code, err.message)
        return jsonify(err.to_dict()), err.status_code

    from .routes.api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    return app
