"""
Model para segmentos ordenados de uma transcrição.
"""

import uuid
from django.db import models

from .transcription import Transcription


class TranscriptionSegment(models.Model):
    # Identificadores
    segment_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transcription = models.ForeignKey(Transcription, on_delete=models.CASCADE, related_name="segments")

    # Conteúdo
    segment_order = models.IntegerField()  # começa em 1
    speaker_label = models.CharField(max_length=100)
    text_content = models.TextField()
    start_time = models.FloatField(default=0)  # em segundos
    end_time = models.FloatField(default=0)  # em segundos

    # Confiança (0-1)
    confidence_score = models.FloatField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["segment_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["transcription", "segment_order"],
                name="unique_segment_order_per_transcription",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.transcription_id} #{self.segment_order} - {self.speaker_label}"
