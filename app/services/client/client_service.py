"""Client resolution for bookings: find by phone, or create"""
import logging
import re
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ValidationFailure
from app.models.client import Client
from app.repositories.client_repository import ClientRepository

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    """Strip formatting; the digits-only phone is the de-duplication key"""
    return re.sub(r"\D", "", phone or "")


class ClientService:

    def __init__(self, clients: ClientRepository):
        self.clients = clients

    def find_or_create(
            self,
            tenant_id: UUID,
            name: str,
            phone: str,
            email: Optional[str] = None
    ) -> Client:
        """
        Resolve the booking client by phone.
        A known client gets the supplied name/email written back (an omitted
        email keeps the stored one). An unknown phone creates a new client.
        """
        clean_phone = normalize_phone(phone)
        if not clean_phone:
            raise ValidationFailure("Client phone number is required")

        existing = self.clients.find_by_phone(tenant_id, clean_phone)
        if existing:
            return self._refresh_details(existing, name, email)

        try:
            client = self.clients.create(
                tenant_id,
                name=name,
                phone=clean_phone,
                email=email,
            )
            logger.info(f"Created client {client.id} for tenant {tenant_id}")
            return client
        except IntegrityError:
            # Lost a race against a concurrent booking with the same phone
            winner = self.clients.find_by_phone(tenant_id, clean_phone)
            if not winner:
                raise
            logger.info(f"Client with phone {clean_phone} created concurrently, reusing {winner.id}")
            return self._refresh_details(winner, name, email)

    def _refresh_details(self, client: Client, name: str, email: Optional[str]) -> Client:
        if client.name != name or (email and client.email != email):
            return self.clients.update(client, name=name, email=email or client.email)
        return client
