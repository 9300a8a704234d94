"""Area Repository."""

from typing import Optional

from aquaflow.models import Area
from aquaflow.repositories.base import CollectionRepository, generate_id
from aquaflow.repositories.customers import CustomerRepository


DEFAULT_AREA_NAME = "New Area"


class AreaRepository(CollectionRepository[Area]):
    """
    CRUD over delivery areas.

    Customers copy the area *name*, so renaming an area cascades the new
    name onto them. Deleting an area does not: its customers keep the old
    label.
    """

    model = Area
    collection = "areas"

    def __init__(self, store, customers: CustomerRepository, key_prefix: str = "aquaflow_"):
        super().__init__(store, key_prefix=key_prefix)
        self._customers = customers

    def get(self, area_id: str) -> Optional[Area]:
        for area in self._load():
            if area.id == area_id:
                return area
        return None

    def upsert(self, area_id: Optional[str] = None, name: Optional[str] = None) -> Area:
        """
        Update the area with ``area_id`` or create a new one.

        An unknown or missing id creates a new area with a fresh random id.
        """
        areas = self._load()
        index = self._find_index(areas, area_id) if area_id else None

        if index is not None:
            current = areas[index]
            if name and name != current.name:
                self._customers.rename_area(current.name, name)
                current = current.model_copy(update={"name": name})
            areas[index] = current
            saved = current
        else:
            saved = Area(id=generate_id(), name=name or DEFAULT_AREA_NAME)
            areas.append(saved)

        self._save(areas)
        self._log.info("area_saved", area_id=saved.id, name=saved.name)
        return saved

    def delete(self, area_id: str) -> bool:
        """Hard delete; customers labelled with this area are left as they are."""
        areas = self._load()
        remaining = [a for a in areas if a.id != area_id]
        if len(remaining) == len(areas):
            return False
        self._save(remaining)
        self._log.info("area_deleted", area_id=area_id)
        return True

    def names(self) -> "list[str]":
        return [area.name for area in self.list()]

    def list(self) -> "list[Area]":
        """All areas sorted by name (case-insensitive)."""
        return sorted(self._load(), key=lambda a: a.name.casefold())
