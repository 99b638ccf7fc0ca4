import logging

from flask import Flask
from flask_cors import CORS

from .config import Config
from .errors import register_error_handlers
from .firebase import init_firebase
from .search import AlgoliaClient


def configure_logging(app):
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
    app.logger.handlers[:] = [handler]
    app.logger.setLevel(app.config['LOG_LEVEL'])


def create_app(config=None, db=None, bucket=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    configure_logging(app)
    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}}, supports_credentials=True)

    init_firebase(app, db=db, bucket=bucket)
    app.extensions['search'] = AlgoliaClient.from_config(app.config)
    if not app.extensions['search'].can_search:
        app.logger.warning('Algolia credentials not found; product search is disabled.')

    register_error_handlers(app)

    from .views import register_blueprints
    register_blueprints(app)

    from .cli import register_commands
    register_commands(app)

    return app
