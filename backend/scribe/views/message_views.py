"""
Views de mensagens e notificações do usuário.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import ScribeError
from ..models import Message, Notification
from ..services.message_service import MessageService
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def inbox(request):
    """Mensagens do usuário, mais recentes primeiro."""
    try:
        messages = MessageService.inbox(request.user)
        return Response(
            {
                "messages": [MessageService.serialize(m) for m in messages],
                "unread": sum(1 for m in messages if not m.read and m.from_admin),
            },
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def mark_message_read(request, message_id):
    try:
        message = MessageService.mark_read(request.user, message_id)
        return Response(MessageService.serialize(message), status=status.HTTP_200_OK)

    except Message.DoesNotExist:
        return Response({"error": "Message not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def reply_to_admin(request):
    """
    Envia mensagem do usuário para o admin.

    Body:
    {
        "subject": "string",
        "content": "string"
    }
    """
    try:
        message = MessageService.send(
            request.user,
            request.data.get("subject"),
            request.data.get("content"),
            from_admin=False,
        )
        return Response(MessageService.serialize(message), status=status.HTTP_201_CREATED)

    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[messages] Erro ao enviar mensagem: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    """
    Notificações do usuário, mais recentes primeiro.

    Query params:
    - unread: true|false
    """
    try:
        unread_only = request.query_params.get("unread", "false").lower() == "true"
        notifications = NotificationService.list_for_user(request.user, unread_only=unread_only)
        return Response(
            {"notifications": [NotificationService.serialize(n) for n in notifications]},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def mark_notification_read(request, notification_id):
    try:
        notification = NotificationService.mark_read(request.user, notification_id)
        return Response(NotificationService.serialize(notification), status=status.HTTP_200_OK)

    except Notification.DoesNotExist:
        return Response({"error": "Notification not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def mark_all_notifications_read(request):
    try:
        updated = NotificationService.mark_all_read(request.user)
        return Response({"updated": updated}, status=status.HTTP_200_OK)

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
