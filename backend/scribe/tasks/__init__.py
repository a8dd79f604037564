from .transcribe_audio_task import transcribe_audio_task
from .expire_free_credits_task import expire_free_credits_task

__all__ = (
    "transcribe_audio_task",
    "expire_free_credits_task",
)
