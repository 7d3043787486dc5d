from typing import Any, Dict, Optional
import logging

from app.exceptions import ServiceValidationError
from adapters.mongo_adapter import to_public
from repositories import ContactRepository
from services.user_service import validate_email

logger = logging.getLogger("smartplates.contact")


class ContactService:
    @staticmethod
    def submit(
        db, name: str, email: str, subject: str, message: str, reason: Optional[str] = None
    ) -> Dict[str, Any]:
        email = validate_email(email)
        if not (name or "").strip():
            raise ServiceValidationError("Name is required")
        if not (message or "").strip():
            raise ServiceValidationError("Message is required")
        doc = ContactRepository(db).create_message(
            name.strip(), email, (subject or "").strip(), message.strip(), reason
        )
        logger.info(f"contact_message_received message_id={doc['_id']} reason={reason}")
        return to_public(doc)
