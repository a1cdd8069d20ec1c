from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_caching import Cache
from flask_cors import CORS
from flask_mail import Mail
from celery import Celery

db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
cors = CORS()
mail = Mail()

# Broker and backend are filled in from the Flask config by create_app
celery_app = Celery(__name__)
