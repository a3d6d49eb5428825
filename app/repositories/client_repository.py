"""Client repository - Database operations for clients"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.client import Client

logger = logging.getLogger(__name__)


class ClientRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: UUID, client_id: UUID) -> Optional[Client]:
        return self.db.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.id == client_id,
            Client.deleted_at.is_(None)
        ).first()

    def find_by_phone(self, tenant_id: UUID, phone: str) -> Optional[Client]:
        return self.db.query(Client).filter(
            Client.tenant_id == tenant_id,
            Client.phone == phone,
            Client.deleted_at.is_(None)
        ).first()

    def create(self, tenant_id: UUID, **client_data) -> Client:
        """Insert a client. IntegrityError (duplicate phone) propagates to the caller."""
        client = Client(tenant_id=tenant_id, **client_data)
        try:
            self.db.add(client)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(client)
        return client

    def update(self, client: Client, **updates) -> Client:
        for key, value in updates.items():
            setattr(client, key, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating client {client.id}: {e}")
            raise
        self.db.refresh(client)
        return client
