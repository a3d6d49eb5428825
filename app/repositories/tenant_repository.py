"""Tenant repository - lookups for tenant configuration"""
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.tenant import Tenant


class TenantRepository:
    """Read-only access to tenants; tenant settings management lives elsewhere"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def get_by_slug(self, slug: str) -> Optional[Tenant]:
        return self.db.query(Tenant).filter(
            Tenant.slug == slug,
            Tenant.active == True
        ).first()
