from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from stkbilling.celery_extension import create_celery

db = SQLAlchemy()
migrate = Migrate()
celery_app = create_celery()
