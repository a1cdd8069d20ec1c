import os
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask
from .config import Config
from .extensions import db, migrate, cache, cors, mail, celery_app
from .blueprints.api import api_bp
from .commands import init_db_command, seed_products_command
from .services import payments


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get('SECRET_KEY') and not app.testing:
        raise ValueError("SECRET_KEY must be set in the .env file.")

    db.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)
    mail.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}}, supports_credentials=True)
    payments.init_app(app)

    celery_app.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_always_eager=app.config.get('CELERY_TASK_ALWAYS_EAGER', False),
        broker_connection_retry_on_startup=True,
        worker_max_tasks_per_child=50,
    )
    # tasks push their own app context through this reference
    celery_app.flask_app = app

    app.register_blueprint(api_bp)

    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_products_command)

    from . import models  # noqa: F401  registers the tables
    from . import celery_tasks  # noqa: F401

    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/oclar.log', maxBytes=102400, backupCount=10)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)

    return app
