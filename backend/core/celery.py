import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

app = Celery("courtscribe")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Filas por tipo de trabalho
app.conf.task_queues = {
    # Transcrição com Whisper (GPU/CPU pesado)
    "audio.transcribe": {"exchange": "audio", "routing_key": "transcribe"},

    # Cron jobs
    "cron.credits": {"exchange": "cron", "routing_key": "credits"},
}

# Configuração de cron jobs (beat schedule)
app.conf.beat_schedule = {
    # Expiração de créditos gratuitos de organizações (todos os dias às 00:05)
    "expire-free-credits-daily": {
        "task": "scribe.tasks.expire_free_credits_task.expire_free_credits_task",
        "schedule": crontab(hour=0, minute=5),
        "options": {"queue": "cron.credits"},
    },
}

# Roteamento de tasks para filas específicas
app.conf.task_routes = {
    "scribe.tasks.transcribe_audio_task.transcribe_audio_task": {"queue": "audio.transcribe"},
    "scribe.tasks.expire_free_credits_task.expire_free_credits_task": {"queue": "cron.credits"},
}

# Configurações gerais
app.conf.task_acks_late = True
app.conf.worker_prefetch_multiplier = 1
app.conf.task_time_limit = 60 * 60  # 60 minutos por áudio
app.conf.task_soft_time_limit = 55 * 60  # 55 minutos (aviso antes do hard limit)
