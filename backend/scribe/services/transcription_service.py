"""
Serviço de transcrições: rótulos de falante, persistência e exportação.

Os rótulos de falante são simulados: cada frase recebe o próximo papel
da lista em rodízio. Não é diarização.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import Hearing, Transcription, TranscriptionSegment

logger = logging.getLogger(__name__)

SPEAKERS = ["Attorney", "Judge", "Witness", "Court Reporter"]

FALLBACK_TEXT = (
    "AI transcription temporarily unavailable. This is a mock transcription. "
    "Please try again or check your audio quality."
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_SENTENCE_TEXT = re.compile(r"[^.!?]+")


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text or "") if s.strip()]


def format_timestamp(seconds: float) -> str:
    seconds = int(max(0, seconds or 0))
    mins, secs = divmod(seconds, 60)
    hours, mins = divmod(mins, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def format_srt_time(seconds: float) -> str:
    millis = int(round((seconds % 1) * 1000)) % 1000
    return f"{format_timestamp(seconds)},{millis:03d}"


def assign_speakers(segments: List[Dict[str, Any]], text: str = "") -> List[Dict[str, Any]]:
    """
    Quebra o texto completo em frases e distribui os papéis em rodízio.

    As frases podem atravessar segmentos do Whisper. O tempo de cada frase
    vem da posição dos seus caracteres dentro dos segmentos.
    Sem segmentos, usa o texto completo com tempos zerados.
    """
    if not segments:
        segments = [{"start": 0.0, "end": 0.0, "text": text, "confidence": 0.85}]

    full_text = ""
    spans = []
    for seg in segments:
        piece = (seg.get("text") or "").strip()
        if not piece:
            continue
        if full_text:
            full_text += " "
        begin = len(full_text)
        full_text += piece
        start = float(seg.get("start", 0))
        spans.append((begin, len(full_text), start, float(seg.get("end", start)), seg))

    def locate(position: int):
        for begin, finish, start, end, seg in spans:
            if position <= finish:
                ratio = max(0, position - begin) / ((finish - begin) or 1)
                return start + (end - start) * ratio, seg
        return spans[-1][3], spans[-1][4]

    labeled = []
    for match in _SENTENCE_TEXT.finditer(full_text):
        raw = match.group()
        sentence = raw.strip()
        if not sentence:
            continue

        first = match.start() + len(raw) - len(raw.lstrip())
        start, seg = locate(first)
        end, _ = locate(first + len(sentence))
        labeled.append({
            "speaker": SPEAKERS[len(labeled) % len(SPEAKERS)],
            "text": sentence,
            "start": round(start, 2),
            "end": round(end, 2),
            "confidence": float(seg.get("confidence", 0.85)),
        })

    return labeled


def fallback_segments() -> List[Dict[str, Any]]:
    return [{
        "speaker": "System",
        "text": FALLBACK_TEXT,
        "start": 0.0,
        "end": 0.0,
        "confidence": 0.0,
    }]


def build_content(labeled_segments: List[Dict[str, Any]]) -> str:
    return "\n\n".join(
        f"[{format_timestamp(seg['start'])}] {seg['speaker']}: {seg['text']}"
        for seg in labeled_segments
    )


def default_title() -> str:
    return f"Transcription - {timezone.localdate().strftime('%m/%d/%Y')}"


class TranscriptionService:
    """Serviço para gerenciar transcrições."""

    @staticmethod
    def create_upload(
        user,
        uploaded_file,
        title: str = "",
        case_number: str = "",
        session_type: str = "",
        hearing_id: Optional[str] = None,
    ) -> Transcription:
        """Cria a transcrição em processamento e grava o arquivo localmente."""
        hearing = None
        if hearing_id:
            hearing = Hearing.objects.get(hearing_id=hearing_id, user=user)

        transcription = Transcription.objects.create(
            user=user,
            hearing=hearing,
            title=(title or "").strip() or default_title(),
            file_name=uploaded_file.name,
            file_size=uploaded_file.size,
            content_type=getattr(uploaded_file, "content_type", "") or "",
            case_number=case_number or "",
            session_type=session_type or "",
            status="processing",
        )

        upload_dir = os.path.join(settings.MEDIA_ROOT, "transcriptions", str(transcription.transcription_id))
        os.makedirs(upload_dir, exist_ok=True)
        local_path = os.path.join(upload_dir, os.path.basename(uploaded_file.name) or "audio")

        with open(local_path, "wb+") as destination:
            for chunk in uploaded_file.chunks():
                destination.write(chunk)

        transcription.local_path = local_path
        transcription.save(update_fields=["local_path", "updated_at"])

        logger.info(
            f"[TRANSCRIBE] Upload {transcription.transcription_id} "
            f"({uploaded_file.name}, {uploaded_file.size} bytes) de {user.user_id}"
        )
        return transcription

    @staticmethod
    def save_result(
        transcription: Transcription,
        labeled_segments: List[Dict[str, Any]],
        duration: float,
        status: str = "completed",
        error_message: Optional[str] = None,
    ) -> Transcription:
        """Grava conteúdo e segmentos ordenados (a partir de 1) atomicamente."""
        speakers = {seg["speaker"] for seg in labeled_segments}
        confidences = [seg["confidence"] for seg in labeled_segments]

        with transaction.atomic():
            TranscriptionSegment.objects.filter(transcription=transcription).delete()
            TranscriptionSegment.objects.bulk_create([
                TranscriptionSegment(
                    transcription=transcription,
                    segment_order=index,
                    speaker_label=seg["speaker"],
                    text_content=seg["text"],
                    start_time=seg["start"],
                    end_time=seg["end"],
                    confidence_score=seg["confidence"],
                )
                for index, seg in enumerate(labeled_segments, 1)
            ])

            transcription.content = build_content(labeled_segments)
            transcription.speaker_count = len(speakers)
            transcription.confidence_score = (
                round(sum(confidences) / len(confidences), 4) if confidences else 0
            )
            transcription.audio_duration = duration or 0
            transcription.status = status
            transcription.error_message = error_message
            transcription.completed_at = timezone.now()
            transcription.save()

        return transcription

    @staticmethod
    def export_text(transcription: Transcription) -> Tuple[str, str]:
        lines = [
            f"[{format_timestamp(seg.start_time)}] {seg.speaker_label} "
            f"({round(seg.confidence_score * 100)}%): {seg.text_content}"
            for seg in transcription.segments.order_by("segment_order")
        ]
        filename = f"legal-transcript-{timezone.localdate().isoformat()}.txt"
        return filename, "\n\n".join(lines)

    @staticmethod
    def export_srt(transcription: Transcription) -> Tuple[str, str]:
        blocks = []
        for index, seg in enumerate(transcription.segments.order_by("segment_order"), 1):
            blocks.append(
                f"{index}\n"
                f"{format_srt_time(seg.start_time)} --> {format_srt_time(seg.end_time)}\n"
                f"{seg.speaker_label}: {seg.text_content.replace(chr(10), ' ')}\n"
            )
        filename = f"legal-transcript-{timezone.localdate().isoformat()}.srt"
        return filename, "\n".join(blocks)

    @staticmethod
    def serialize(transcription: Transcription, include_segments: bool = False) -> Dict[str, Any]:
        data = {
            "transcription_id": str(transcription.transcription_id),
            "title": transcription.title,
            "status": transcription.status,
            "content": transcription.content,
            "audio_duration": transcription.audio_duration,
            "speaker_count": transcription.speaker_count,
            "confidence_score": transcription.confidence_score,
            "file_name": transcription.file_name,
            "file_size": transcription.file_size,
            "case_number": transcription.case_number,
            "session_type": transcription.session_type,
            "hearing_id": str(transcription.hearing_id) if transcription.hearing_id else None,
            "credits_charged": transcription.credits_charged,
            "error_message": transcription.error_message,
            "created_at": transcription.created_at.isoformat(),
            "completed_at": transcription.completed_at.isoformat() if transcription.completed_at else None,
        }
        if include_segments:
            data["segments"] = [
                {
                    "segment_order": seg.segment_order,
                    "speaker_label": seg.speaker_label,
                    "text_content": seg.text_content,
                    "start_time": seg.start_time,
                    "end_time": seg.end_time,
                    "timestamp": format_timestamp(seg.start_time),
                    "confidence_score": seg.confidence_score,
                }
                for seg in transcription.segments.order_by("segment_order")
            ]
        return data
