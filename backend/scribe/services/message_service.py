"""
Serviço de mensagens entre admin e usuários.
"""

import logging
from typing import Any, Dict, List

from ..exceptions import ScribeError
from ..models import Message

logger = logging.getLogger(__name__)


class MessageService:
    """Serviço para mensagens."""

    @staticmethod
    def send(user, subject: str, content: str, from_admin: bool) -> Message:
        subject = (subject or "").strip()
        content = (content or "").strip()
        if not subject or not content:
            raise ScribeError("subject and content are required")

        message = Message.objects.create(
            user=user,
            subject=subject,
            content=content,
            from_admin=from_admin,
        )
        logger.info(
            f"[messages] Mensagem {message.message_id} "
            f"({'admin -> usuário' if from_admin else 'usuário -> admin'}) {user.user_id}"
        )
        return message

    @staticmethod
    def inbox(user) -> List[Message]:
        return list(Message.objects.filter(user=user).order_by("-created_at"))

    @staticmethod
    def mark_read(user, message_id) -> Message:
        message = Message.objects.get(message_id=message_id, user=user)
        if not message.read:
            message.read = True
            message.save(update_fields=["read"])
        return message

    @staticmethod
    def serialize(message: Message) -> Dict[str, Any]:
        return {
            "message_id": str(message.message_id),
            "user_id": str(message.user_id),
            "subject": message.subject,
            "content": message.content,
            "from_admin": message.from_admin,
            "read": message.read,
            "created_at": message.created_at.isoformat(),
        }
