import json
import logging
import os

from celery import shared_task

from ..exceptions import InsufficientCreditsError
from ..models import Transcription
from ..services.credit_service import CreditService
from ..services.notification_service import NotificationService
from ..services.storage_service import R2StorageService
from ..services.transcription_engine import SAMPLE_RATE, get_engine
from ..services.transcription_service import (
    TranscriptionService,
    assign_speakers,
    fallback_segments,
)

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def transcribe_audio_task(self, transcription_id: str) -> dict:
    transcription = None
    try:
        logger.info(f"[TRANSCRIBE] Iniciando transcrição {transcription_id}")

        transcription = Transcription.objects.select_related("user").get(
            transcription_id=transcription_id
        )
        if transcription.status != "processing":
            logger.warning(f"[TRANSCRIBE] {transcription_id} está {transcription.status}. Ignorando.")
            return {"transcription_id": transcription_id, "status": "skipped"}

        engine = get_engine()

        try:
            audio = engine.load_audio(transcription.local_path)
        except Exception as e:
            logger.error(f"[TRANSCRIBE] Falha ao ler áudio {transcription_id}: {e}", exc_info=True)
            _save_fallback(transcription, 0, str(e))
            return {"transcription_id": transcription_id, "status": "failed", "error": str(e)}

        duration = len(audio) / SAMPLE_RATE

        if transcription.credits_charged == 0 and not transcription.charge_source:
            credits_needed = CreditService.credits_needed_for_duration(duration)
            try:
                charge = CreditService.consume_credits(
                    transcription.user,
                    credits_needed,
                    f"Transcription {transcription.title} ({duration:.0f}s)",
                    reference_id=transcription.transcription_id,
                )
            except InsufficientCreditsError as e:
                transcription.status = "failed"
                transcription.audio_duration = duration
                transcription.error_message = e.message
                transcription.save()
                NotificationService.notify(
                    transcription.user,
                    "credits",
                    "Insufficient Credits",
                    f"{transcription.title} needs {credits_needed} credits. {e.message}",
                )
                return {"transcription_id": transcription_id, "status": "failed", "error": e.message}

            transcription.credits_charged = charge["amount"]
            transcription.charge_source = charge["source"]
            transcription.charge_member_id = charge["member_id"]
            transcription.charge_organization_id = charge["organization_id"]
            transcription.save()

        try:
            result = engine.transcribe_audio(audio)
        except Exception as e:
            logger.error(f"[TRANSCRIBE] Falha no Whisper {transcription_id}: {e}", exc_info=True)
            _refund(transcription, f"Refund: transcription {transcription.title} failed")
            _save_fallback(transcription, duration, str(e))
            return {"transcription_id": transcription_id, "status": "failed", "error": str(e)}

        labeled = assign_speakers(result["segments"], result["text"])
        TranscriptionService.save_result(transcription, labeled, result["duration"])

        _upload_to_storage(transcription, result)

        NotificationService.notify(
            transcription.user,
            "transcription",
            "Transcription Ready",
            f"{transcription.title} was transcribed successfully.",
        )

        logger.info(
            f"[TRANSCRIBE] {transcription_id} concluída: {len(labeled)} segmentos, "
            f"{transcription.credits_charged} créditos"
        )
        return {
            "transcription_id": transcription_id,
            "status": "completed",
            "segments": len(labeled),
            "credits_charged": transcription.credits_charged,
        }

    except Transcription.DoesNotExist:
        return {"error": "Transcription not found", "status": "failed"}
    except Exception as e:
        logger.error(f"[TRANSCRIBE] Erro transcrição {transcription_id}: {str(e)}", exc_info=True)
        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=2 ** self.request.retries)

        if transcription is not None:
            _refund(transcription, f"Refund: transcription {transcription.title} failed")
            transcription.status = "failed"
            transcription.error_message = str(e)
            transcription.save()

        return {"error": str(e), "status": "failed"}


def _refund(transcription: Transcription, reason: str) -> None:
    if transcription.credits_charged <= 0:
        return

    CreditService.refund_credits(
        transcription.user,
        {
            "source": transcription.charge_source,
            "amount": transcription.credits_charged,
            "member_id": transcription.charge_member_id,
            "organization_id": transcription.charge_organization_id,
        },
        reason,
        reference_id=transcription.transcription_id,
    )
    transcription.credits_charged = 0
    transcription.save(update_fields=["credits_charged", "updated_at"])


def _save_fallback(transcription: Transcription, duration: float, error: str) -> None:
    TranscriptionService.save_result(
        transcription,
        fallback_segments(),
        duration,
        status="failed",
        error_message=error,
    )
    NotificationService.notify(
        transcription.user,
        "transcription",
        "Transcription Failed",
        f"{transcription.title} could not be transcribed. Please try again or check your audio quality.",
    )


def _upload_to_storage(transcription: Transcription, result: dict) -> None:
    """Envia áudio e JSON da transcrição para o R2 quando configurado."""
    if not R2StorageService.is_configured():
        return

    user_id = str(transcription.user_id)
    transcription_id = str(transcription.transcription_id)
    json_path = os.path.join(os.path.dirname(transcription.local_path), "transcript.json")

    try:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result, f, ensure_ascii=False, indent=2)

        storage = R2StorageService()
        transcription.storage_path = storage.upload_audio(
            transcription.local_path,
            user_id,
            transcription_id,
            transcription.file_name,
        )
        storage.upload_transcript(json_path, user_id, transcription_id)
        transcription.save(update_fields=["storage_path", "updated_at"])

        os.remove(transcription.local_path)
        os.remove(json_path)
    except Exception as e:
        logger.warning(f"[TRANSCRIBE] Falha ao enviar {transcription_id} para o R2: {e}")
