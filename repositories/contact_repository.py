"""
Contact Repository - stores contact form submissions
"""

from typing import List

from repositories.base import BaseRepository, Document
from domain.enums import ContactStatus


class ContactRepository(BaseRepository):
    collection_name = "contact_messages"

    def create_message(self, name: str, email: str, subject: str, message: str, reason: str = None) -> Document:
        return self.create(
            {
                "name": name,
                "email": email,
                "subject": subject,
                "message": message,
                "reason": reason,
                "status": ContactStatus.NEW.value,
            }
        )

    def list_new(self, limit: int = 50) -> List[Document]:
        return self.get_all(limit=limit, query={"status": ContactStatus.NEW.value})
