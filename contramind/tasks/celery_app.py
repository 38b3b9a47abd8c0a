from celery import Celery

from contramind.core.config import settings

celery_app = Celery(
    "contramind",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.task_routes = {"contramind.tasks.*": {"queue": "contract-tasks"}}
celery_app.conf.task_always_eager = settings.CELERY_TASK_ALWAYS_EAGER
celery_app.conf.beat_schedule = {
    "sweep-stalled-contracts": {
        "task": "contramind.tasks.sweep_stalled_contracts",
        "schedule": 300.0,
    },
}
celery_app.autodiscover_tasks(["contramind.tasks"])
