"""Service and professional lookups used by the booking flow"""
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.professional import Professional, professional_services
from app.models.service import Service


class ServiceRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_active(self, tenant_id: UUID) -> List[Service]:
        return self.db.query(Service).filter(
            Service.tenant_id == tenant_id,
            Service.active == True,
            Service.deleted_at.is_(None)
        ).order_by(Service.name).all()

    def get_by_ids(self, tenant_id: UUID, service_ids: Sequence[UUID]) -> List[Service]:
        """
        Resolve services in selection order.
        Unknown ids are dropped; a repeated id yields the service again.
        """
        if not service_ids:
            return []

        rows = self.db.query(Service).filter(
            Service.tenant_id == tenant_id,
            Service.id.in_(list(set(service_ids))),
            Service.deleted_at.is_(None)
        ).all()

        by_id = {row.id: row for row in rows}
        return [by_id[service_id] for service_id in service_ids if service_id in by_id]


class ProfessionalRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: UUID, professional_id: UUID) -> Optional[Professional]:
        return self.db.query(Professional).filter(
            Professional.tenant_id == tenant_id,
            Professional.id == professional_id,
            Professional.deleted_at.is_(None)
        ).first()

    def get_active(self, tenant_id: UUID) -> List[Professional]:
        return self.db.query(Professional).filter(
            Professional.tenant_id == tenant_id,
            Professional.active == True,
            Professional.deleted_at.is_(None)
        ).order_by(Professional.name).all()

    def get_for_services(self, tenant_id: UUID, service_ids: Sequence[UUID]) -> List[Professional]:
        """Active professionals that perform every one of the given services"""
        wanted = set(service_ids)
        if not wanted:
            return []

        mappings = self.db.query(
            professional_services.c.professional_id,
            professional_services.c.service_id
        ).filter(
            professional_services.c.tenant_id == tenant_id,
            professional_services.c.service_id.in_(list(wanted))
        ).all()

        offered = {}
        for professional_id, service_id in mappings:
            offered.setdefault(professional_id, set()).add(service_id)

        qualified = [pid for pid, services in offered.items() if wanted <= services]
        if not qualified:
            return []

        return self.db.query(Professional).filter(
            Professional.tenant_id == tenant_id,
            Professional.id.in_(qualified),
            Professional.active == True,
            Professional.deleted_at.is_(None)
        ).order_by(Professional.name).all()
