from dataclasses import dataclass

from backend.app.core.colors import normalize_color

# Tag value reported by a tray with no spool or an untagged spool
ZERO_TAG_UID = "0000000000000000"


def is_valid_tag(tag_id: str | None) -> bool:
    """Check that a tag is non-empty and not an all-zero placeholder."""
    return bool(tag_id) and tag_id != ZERO_TAG_UID and tag_id != "0" * len(tag_id)


@dataclass
class TraySnapshot:
    """State of one AMS tray as reported by the sensor source."""

    tag_id: str
    material_type: str = ""
    color_rgb: str = ""
    display_name: str = ""
    remaining_percent: float = 0
    is_empty: bool = False
    manufacturer: str = ""
    spool_size_grams: float | None = None

    def __post_init__(self):
        self.color_rgb = normalize_color(self.color_rgb)

    @classmethod
    def from_attributes(cls, attrs: dict) -> "TraySnapshot":
        """Build a snapshot from Home Assistant tray sensor attributes."""
        remain = attrs.get("remain")
        if not isinstance(remain, (int, float)) or isinstance(remain, bool):
            remain = 0
        return cls(
            tag_id=attrs.get("tag_uid") or "",
            material_type=attrs.get("type") or "",
            color_rgb=attrs.get("color") or "",
            display_name=attrs.get("name") or "",
            remaining_percent=remain,
            is_empty=bool(attrs.get("empty", False)),
        )
