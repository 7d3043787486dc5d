"""Contact form route"""

from fastapi import APIRouter, Depends, status
import logging

from api.dependencies import get_db, rate_limit
from domain.schemas.misc_schemas import ContactRequest
from services.contact_service import ContactService

router = APIRouter(tags=["Contact"])
logger = logging.getLogger("smartplates.api.contact")


@router.post("/contact", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limit)])
def submit_contact(body: ContactRequest, db=Depends(get_db)):
    message = ContactService.submit(db, body.name, body.email, body.subject, body.message, body.reason)
    return {"success": True, "id": message["id"]}
