from oclar import create_app
from oclar.extensions import celery_app

app = create_app()
# docker-compose starts the worker with `celery -A oclar.celery_worker.celery`
celery = celery_app
