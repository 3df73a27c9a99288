"""
Module 'webhooks': réception des événements Stripe signés.
"""

from .service import verify_event, process_event, handle_completed_session, COMPLETED_EVENT

__all__ = ["verify_event", "process_event", "handle_completed_session", "COMPLETED_EVENT"]
