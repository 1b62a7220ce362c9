import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.app.core.auth import CurrentUser
from backend.app.core.database import get_catalog, get_store
from backend.app.models.catalog_entry import CatalogEntry
from backend.app.models.filament import FilamentRecord
from backend.app.schemas.filament import FilamentResponse, FilamentSave
from backend.app.services.inventory_store import InventoryStore
from backend.app.services.material_catalog import MaterialCatalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/filaments", tags=["filaments"])

# Manual entries start full unless the form says otherwise
MANUAL_DEFAULT_REMAINING = 100


def _to_response(store: InventoryStore, records: list[FilamentRecord]) -> list[FilamentResponse]:
    usernames = {u.id: u.username for u in store.list_users()}
    return [
        FilamentResponse.model_validate(record).model_copy(
            update={"username": usernames.get(record.owner_id, "Unknown")}
        )
        for record in records
    ]


@router.get("", response_model=list[FilamentResponse])
async def list_filaments(
    current_user: CurrentUser,
    view_all: bool = False,
    store: InventoryStore = Depends(get_store),
):
    """List the caller's filaments, or every user's with ``view_all``."""
    records = store.get_all() if view_all else store.get_by_owner(current_user.id)
    return _to_response(store, records)


@router.get("/search/{code}", response_model=FilamentResponse)
async def search_filament(
    code: str,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
):
    """Find one of the caller's filaments by tag or serial number."""
    record = store.find_by_code(current_user.id, code)
    if not record:
        raise HTTPException(404, "Filament not found")
    return _to_response(store, [record])[0]


@router.post("", response_model=list[FilamentResponse])
async def save_filament(
    data: FilamentSave,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Add a filament, or update it if its tag already exists.

    A new filament with a complete description is also added to the material
    catalog when the catalog does not know that combination yet.
    """
    values = data.model_dump(exclude_none=True, exclude={"tag_id", "ean"})

    existing = store.get_by_tag(data.tag_id) if data.tag_id else None
    if existing:
        if existing.owner_id != current_user.id and not current_user.is_admin:
            raise HTTPException(403, "Forbidden")
        store.update(existing.tag_id, **values)
    else:
        values.setdefault("remaining_percent", MANUAL_DEFAULT_REMAINING)
        record = store.create(current_user.id, tag_id=data.tag_id, **values)
        if all((data.manufacturer, data.material_type, data.display_name, data.color_name, data.color_rgb)):
            catalog.add_missing(
                CatalogEntry(
                    manufacturer=record.manufacturer,
                    material_type=record.material_type,
                    variation=record.variation,
                    display_name=record.display_name,
                    color_name=record.color_name,
                    color_rgb=record.color_rgb,
                    eans=[data.ean] if data.ean else [],
                )
            )

    return _to_response(store, store.get_by_owner(current_user.id))


@router.delete("/{tag_id}", response_model=list[FilamentResponse])
async def delete_filament(
    tag_id: str,
    current_user: CurrentUser,
    store: InventoryStore = Depends(get_store),
):
    """Delete a filament owned by the caller (admins may delete any)."""
    record = store.get_by_tag(tag_id)
    if not record:
        raise HTTPException(404, "Filament not found")
    if record.owner_id != current_user.id and not current_user.is_admin:
        raise HTTPException(403, "Forbidden")

    store.delete(tag_id)
    return _to_response(store, store.get_by_owner(current_user.id))
