from .credit_service import CreditService
from .organization_service import OrganizationService
from .invitation_service import InvitationService
from .payment_service import PaymentService
from .notification_service import NotificationService
from .message_service import MessageService
from .admin_service import AdminService
from .transcription_service import TranscriptionService

__all__ = (
    "CreditService",
    "OrganizationService",
    "InvitationService",
    "PaymentService",
    "NotificationService",
    "MessageService",
    "AdminService",
    "TranscriptionService",
)
