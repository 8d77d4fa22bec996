# barberbook/models/__init__.py
from .base import Base
from .barber import Barber
from .client import Client
from .appointment import Appointment
from .conversation import ConversationSession, ConversationMessage

__all__ = [
    "Base",
    "Barber",
    "Client",
    "Appointment",
    "ConversationSession",
    "ConversationMessage",
]
