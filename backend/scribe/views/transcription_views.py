"""
Views de transcrições: upload, consulta, exportação e remoção.
"""

import logging
import os
import shutil

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import rate_limit, require_active, require_credits
from ..models import Hearing, Transcription
from ..services.storage_service import R2StorageService
from ..services.transcription_engine import get_engine
from ..services.transcription_service import TranscriptionService
from ..tasks.transcribe_audio_task import transcribe_audio_task
from ..validators import AudioUploadValidator

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
@require_active
@require_credits
@rate_limit(requests_per_hour=60, requests_per_minute=5)
def upload_transcription(request):
    """
    Recebe um áudio e enfileira a transcrição.

    Form data:
    - file: arquivo de áudio ou vídeo
    - title: string (opcional)
    - case_number: string (opcional)
    - session_type: string (opcional)
    - hearing_id: uuid (opcional)
    """
    try:
        uploaded_file = request.FILES.get("file")
        if uploaded_file is None:
            return Response({"error": "file is required"}, status=status.HTTP_400_BAD_REQUEST)

        validation = AudioUploadValidator.validate_file(uploaded_file)
        if not validation["valid"]:
            return Response(
                {"error": validation["errors"][0], "errors": validation["errors"]},
                status=status.HTTP_400_BAD_REQUEST,
            )

        transcription = TranscriptionService.create_upload(
            request.user,
            uploaded_file,
            title=request.data.get("title", ""),
            case_number=request.data.get("case_number", ""),
            session_type=request.data.get("session_type", ""),
            hearing_id=request.data.get("hearing_id") or None,
        )

        task = transcribe_audio_task.apply_async(
            args=[str(transcription.transcription_id)],
            queue="audio.transcribe",
        )

        transcription.task_id = task.id
        transcription.save(update_fields=["task_id", "updated_at"])

        return Response(
            {
                "transcription_id": str(transcription.transcription_id),
                "title": transcription.title,
                "status": transcription.status,
                "task_id": task.id,
            },
            status=status.HTTP_202_ACCEPTED,
        )

    except Hearing.DoesNotExist:
        return Response({"error": "Hearing not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"[TRANSCRIBE] Erro no upload: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def list_transcriptions(request):
    """
    Transcrições do usuário, mais recentes primeiro.

    Query params:
    - status: processing|completed|failed (opcional)
    """
    try:
        query = Transcription.objects.filter(user=request.user).order_by("-created_at")
        status_filter = request.query_params.get("status")
        if status_filter:
            query = query.filter(status=status_filter)

        return Response(
            {"transcriptions": [TranscriptionService.serialize(t) for t in query]},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET", "DELETE"])
@permission_classes([IsAuthenticated])
@require_active
def transcription_detail(request, transcription_id):
    """
    GET: transcrição com segmentos ordenados.
    DELETE: remove transcrição, segmentos e arquivos.
    """
    try:
        transcription = Transcription.objects.get(
            transcription_id=transcription_id, user=request.user
        )

        if request.method == "GET":
            return Response(
                TranscriptionService.serialize(transcription, include_segments=True),
                status=status.HTTP_200_OK,
            )

        _delete_files(transcription)
        transcription.delete()
        logger.info(f"[TRANSCRIBE] Transcrição {transcription_id} removida por {request.user.user_id}")
        return Response({"status": "deleted"}, status=status.HTTP_200_OK)

    except Transcription.DoesNotExist:
        return Response({"error": "Transcription not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"[TRANSCRIBE] Erro na transcrição {transcription_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def export_transcription(request, transcription_id):
    """
    Exporta a transcrição como anexo.

    Query params:
    - format: txt|srt (padrão txt)
    """
    try:
        transcription = Transcription.objects.get(
            transcription_id=transcription_id, user=request.user
        )

        export_format = request.query_params.get("format", "txt")
        if export_format == "srt":
            filename, body = TranscriptionService.export_srt(transcription)
            content_type = "application/x-subrip"
        elif export_format == "txt":
            filename, body = TranscriptionService.export_text(transcription)
            content_type = "text/plain"
        else:
            return Response(
                {"error": "format must be 'txt' or 'srt'"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        response = HttpResponse(body, content_type=f"{content_type}; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

    except Transcription.DoesNotExist:
        return Response({"error": "Transcription not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def transcription_engine_status(request):
    """Estado do modelo Whisper no processo atual."""
    engine = get_engine()
    return Response(
        {
            "ready": engine.is_ready(),
            "initializing": engine.is_initializing(),
            "device": engine.device,
        },
        status=status.HTTP_200_OK,
    )


def _delete_files(transcription: Transcription) -> None:
    if transcription.local_path:
        shutil.rmtree(os.path.dirname(transcription.local_path), ignore_errors=True)

    if transcription.storage_path and R2StorageService.is_configured():
        try:
            storage = R2StorageService()
            storage.delete_prefix(
                f"audio/{transcription.user_id}/{transcription.transcription_id}/"
            )
            storage.delete_prefix(
                f"transcripts/{transcription.user_id}/{transcription.transcription_id}/"
            )
        except Exception as e:
            logger.warning(
                f"[TRANSCRIBE] Falha ao apagar arquivos R2 de {transcription.transcription_id}: {e}"
            )
