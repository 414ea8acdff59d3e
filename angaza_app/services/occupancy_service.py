import logging

from core.exceptions import NotFound
from models.enums import UnitStatus
from models.models import Property, Unit
from repos.property_repo import PropertyRepo
from repos.unit_repo import UnitRepo

logger = logging.getLogger(__name__)


def clamp_available(total_units: int, non_vacant: int) -> int:
    return max(0, min(total_units, total_units - non_vacant))


class OccupancyService:
    """Keeps unit status and a property's available-unit count in step.

    Callers run inside their own ``atomic`` block; nothing here commits.
    """

    def __init__(self, db):
        self.db = db
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.unit_repo: UnitRepo = UnitRepo(db)

    async def recompute(self, property_id: int) -> Property:
        prop = await self.property_repo.get_by_id(property_id, for_update=True)
        if not prop:
            raise NotFound("Property not found.")

        await self.db.flush()
        non_vacant = await self.unit_repo.count_non_vacant(property_id)
        available = clamp_available(prop.total_units, non_vacant)
        if prop.available_units != available:
            logger.info(
                "Property %s available units %s -> %s (%s of %s units in use)",
                prop.id,
                prop.available_units,
                available,
                non_vacant,
                prop.total_units,
            )
            prop.available_units = available
            await self.property_repo.save()
        return prop

    async def set_unit_status(self, unit: Unit, status: UnitStatus) -> Property:
        if unit.status != status:
            logger.info("Unit %s status %s -> %s", unit.id, unit.status, status)
            unit.status = status
            await self.unit_repo.save()
        return await self.recompute(unit.property_id)

    async def occupy(self, unit: Unit) -> Property:
        return await self.set_unit_status(unit, UnitStatus.OCCUPIED)

    async def vacate(self, unit: Unit) -> Property:
        return await self.set_unit_status(unit, UnitStatus.VACANT)
