"""
View de processamento de transcrições com IA.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import ScribeError
from ..models import Transcription
from ..services.ai_service import AIService

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def process_transcription(request, transcription_id):
    """
    Resume a transcrição ou responde a um prompt livre.

    Body:
    {
        "action": "summarize|custom",
        "prompt": "string (obrigatório em custom)"
    }
    """
    try:
        transcription = Transcription.objects.get(
            transcription_id=transcription_id, user=request.user
        )
        result = AIService.process_transcript(
            transcription,
            request.data.get("action", "summarize"),
            request.data.get("prompt"),
        )
        return Response(result, status=status.HTTP_200_OK)

    except Transcription.DoesNotExist:
        return Response({"error": "Transcription not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[ai] Erro ao processar transcrição {transcription_id}: {e}", exc_info=True)
        return Response(
            {"error": "Failed to process transcript text"},
            status=status.HTTP_400_BAD_REQUEST,
        )
