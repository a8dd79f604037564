from .credits import Credits
from .credit_request import CreditRequest
from .credit_transaction import CreditTransaction
from .organization import Organization
from .organization_member import OrganizationMember
from .payment import Payment
from .project import Project
from .hearing import Hearing
from .transcription import Transcription
from .transcription_segment import TranscriptionSegment
from .message import Message
from .notification import Notification

__all__ = (
    "Credits",
    "CreditRequest",
    "CreditTransaction",
    "Organization",
    "OrganizationMember",
    "Payment",
    "Project",
    "Hearing",
    "Transcription",
    "TranscriptionSegment",
    "Message",
    "Notification",
)
