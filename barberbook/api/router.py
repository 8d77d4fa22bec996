"""
Webhook router setup
Organized into: appointments, availability, conversation, barbers and clients
"""
from fastapi import APIRouter

from barberbook.api import appointments, availability, barbers, clients, conversation

api_router = APIRouter()

# ============================================================================
# BOOKING ROUTES (called by the SMS automation flow)
# ============================================================================
api_router.include_router(appointments.router)
api_router.include_router(availability.router)
api_router.include_router(conversation.router)
api_router.include_router(clients.router)

# ============================================================================
# BARBER ONBOARDING ROUTES
# ============================================================================
api_router.include_router(barbers.router)
