from pydantic import BaseModel, Field

from backend.app.models.catalog_entry import CatalogEntry


class MaterialEntry(BaseModel):
    manufacturer: str = Field(..., min_length=1)
    material_type: str = Field(..., min_length=1)
    variation: str = ""
    display_name: str = Field(..., min_length=1)
    color_name: str = Field(..., min_length=1)
    color_rgb: str = Field(..., min_length=1)
    note: str = ""
    eans: list[str] = []

    class Config:
        from_attributes = True

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(**self.model_dump())


class MaterialKey(BaseModel):
    manufacturer: str = Field(..., min_length=1)
    material_type: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    color_name: str = Field(..., min_length=1)
    color_rgb: str = Field(..., min_length=1)


class MaterialEANUpdate(MaterialKey):
    ean: str = Field(..., min_length=1)


class CustomColorCreate(BaseModel):
    material_type: str = Field(..., min_length=1)
    color_name: str = Field(..., min_length=1)
    color_rgb: str = Field(..., min_length=1)


class ColorOption(BaseModel):
    color_name: str
    color_rgb: str
    note: str
