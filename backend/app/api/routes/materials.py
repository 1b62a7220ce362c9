import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.core.auth import CurrentUser, require_role
from backend.app.core.database import get_catalog
from backend.app.models.user import User
from backend.app.schemas.material import (
    ColorOption,
    CustomColorCreate,
    MaterialEANUpdate,
    MaterialEntry,
    MaterialKey,
)
from backend.app.services.material_catalog import (
    CatalogEntryExistsError,
    CatalogEntryNotFoundError,
    MaterialCatalog,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get("/types", response_model=list[str])
async def list_material_types(catalog: MaterialCatalog = Depends(get_catalog)):
    return catalog.list_material_types()


@router.get("/all", response_model=list[MaterialEntry])
async def list_all_materials(catalog: MaterialCatalog = Depends(get_catalog)):
    return catalog.all_entries()


@router.get("/lookup", response_model=MaterialEntry)
async def lookup_material(
    name: str = Query(..., min_length=1),
    color: str = Query(..., min_length=1),
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Resolve a product name and colour the same way tray sync does."""
    entry = catalog.lookup_by_name_and_color(name, color)
    if entry is None:
        raise HTTPException(404, "No matching material")
    return entry


@router.get("/ean/{ean}", response_model=MaterialEntry)
async def get_material_by_ean(ean: str, catalog: MaterialCatalog = Depends(get_catalog)):
    entry = catalog.find_by_ean(ean)
    if entry is None:
        raise HTTPException(404, "Product not found")
    return entry


@router.get("/{material_type}/colors", response_model=list[ColorOption])
async def list_colors(material_type: str, catalog: MaterialCatalog = Depends(get_catalog)):
    return catalog.list_colors(material_type)


@router.get("/{material_type}/variations", response_model=list[str])
async def list_variations(material_type: str, catalog: MaterialCatalog = Depends(get_catalog)):
    return catalog.list_variations(material_type)


@router.post("", status_code=201)
async def add_custom_color(
    data: CustomColorCreate,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Add a custom colour to a Bambu material type."""
    if not catalog.add_custom_color(data.material_type, data.color_name, data.color_rgb):
        raise HTTPException(400, "Color already exists")
    return {"success": True}


@router.post("/add", response_model=MaterialEntry, status_code=201)
async def add_material(
    data: MaterialEntry,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    try:
        return catalog.add_entry(data.to_entry())
    except CatalogEntryExistsError as e:
        raise HTTPException(400, str(e))


@router.put("/update", response_model=MaterialEntry)
async def update_material(
    data: MaterialEntry,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Replace a material matched by manufacturer, type, name and colour name."""
    try:
        return catalog.update_entry(data.to_entry())
    except CatalogEntryNotFoundError as e:
        raise HTTPException(404, str(e))


@router.delete("/delete")
async def delete_material(
    data: MaterialKey,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    try:
        catalog.delete_entry(data.manufacturer, data.material_type, data.display_name, data.color_name, data.color_rgb)
    except CatalogEntryNotFoundError as e:
        raise HTTPException(404, str(e))
    return {"success": True}


@router.post("/update-ean")
async def update_material_ean(
    data: MaterialEANUpdate,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Attach a scanned barcode to catalog data."""
    return catalog.add_ean(
        data.ean, data.manufacturer, data.material_type, data.display_name, data.color_name, data.color_rgb
    )


@router.post("/update-from-filament")
async def update_material_from_filament(
    data: MaterialKey,
    _: CurrentUser,
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Record the colour of an edited filament in the catalog."""
    result = catalog.upsert_from_filament(
        data.manufacturer, data.material_type, data.display_name, data.color_name, data.color_rgb
    )
    return {
        "action": result["action"],
        "material": MaterialEntry.model_validate(result["material"]),
    }


@router.post("/aggregate")
async def aggregate_materials(
    admin: User = Depends(require_role("admin")),
    catalog: MaterialCatalog = Depends(get_catalog),
):
    """Merge duplicate catalog entries, joining their EANs."""
    removed = catalog.aggregate_duplicates()
    logger.info("%s merged %d duplicate materials", admin.username, removed)
    return {"removed": removed, "total": len(catalog.entries)}
