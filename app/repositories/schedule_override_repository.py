"""Schedule override lookups"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.schedule_override import ScheduleOverride


class ScheduleOverrideRepository:

    def __init__(self, db: Session):
        self.db = db

    def list_covering(
            self,
            tenant_id: UUID,
            professional_id: UUID,
            day: date,
            override_type: Optional[str] = None
    ) -> List[ScheduleOverride]:
        """Overrides whose inclusive [start_date, end_date] contains the day"""
        query = self.db.query(ScheduleOverride).filter(
            ScheduleOverride.tenant_id == tenant_id,
            ScheduleOverride.professional_id == professional_id,
            ScheduleOverride.start_date <= day,
            ScheduleOverride.end_date >= day
        )

        if override_type:
            query = query.filter(ScheduleOverride.override_type == override_type)

        return query.order_by(ScheduleOverride.created_at.asc()).all()
