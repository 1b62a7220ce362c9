from dataclasses import dataclass, field

from backend.app.core.colors import normalize_color

# Dataset keys written by the reference catalog, in file order
_STORAGE_KEYS = ("manufacturer", "material", "variation", "name", "colorname", "color", "note", "ean")


def split_eans(raw) -> list[str]:
    """Parse the dataset's comma-joined EAN string into an ordered, unique list."""
    if isinstance(raw, list):
        values = raw
    else:
        values = (raw or "").split(",")
    eans: list[str] = []
    for value in values:
        value = str(value).strip()
        if value and value not in eans:
            eans.append(value)
    return eans


@dataclass
class CatalogEntry:
    """Reference data for one manufacturer / material / colour combination."""

    manufacturer: str = ""
    material_type: str = ""
    variation: str = ""
    display_name: str = ""
    color_name: str = ""
    color_rgb: str = ""
    note: str = ""
    eans: list[str] = field(default_factory=list)
    # Dataset keys this model does not know about, preserved on save
    extra: dict = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        self.color_rgb = normalize_color(self.color_rgb)

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        return (self.manufacturer, self.material_type, self.display_name, self.color_name, self.color_rgb)

    def add_ean(self, ean: str) -> bool:
        """Append ``ean`` unless already present. Returns True if added."""
        if ean in self.eans:
            return False
        self.eans.append(ean)
        return True

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogEntry":
        return cls(
            manufacturer=data.get("manufacturer") or "",
            material_type=data.get("material") or "",
            variation=data.get("variation") or "",
            display_name=data.get("name") or "",
            color_name=data.get("colorname") or "",
            color_rgb=data.get("color") or "",
            note=data.get("note") or "",
            eans=split_eans(data.get("ean")),
            extra={k: v for k, v in data.items() if k not in _STORAGE_KEYS},
        )

    def to_dict(self) -> dict:
        data = {
            "manufacturer": self.manufacturer,
            "material": self.material_type,
            "variation": self.variation,
            "name": self.display_name,
            "colorname": self.color_name,
            "color": self.color_rgb,
            "note": self.note,
            "ean": ",".join(self.eans),
        }
        data.update(self.extra)
        return data
