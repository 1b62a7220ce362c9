"""Recover a bare material type from a product display name.

AMS trays report product names such as "Bambu PLA Matte" or "Bambu PETG HF".
When the catalog has no entry under that exact name, the material type
("PLA", "PETG") is used as a second lookup key.
"""

# Brand prefixes that precede the material in product names, longest first
BRAND_PREFIXES: tuple[str, ...] = (
    "Bambu Lab",
    "BambuLab",
    "Bambu",
)

# Recognized material tokens, composite types before their base type
MATERIAL_TOKENS: tuple[str, ...] = (
    "PETG-CF",
    "PLA-CF",
    "ABS-GF",
    "PA6-CF",
    "PA6-GF",
    "PAHT-CF",
    "PA-CF",
    "PC-FR",
    "PET-CF",
    "PPA-CF",
    "PPS-CF",
    "TPU-AMS",
    "PETG",
    "PLA",
    "ABS",
    "ASA",
    "TPU",
    "PVA",
    "HIPS",
    "PET",
    "PC",
    "PA",
    "PP",
    "Support",
)


def strip_brand_prefix(name: str) -> tuple[str, bool]:
    """Remove a leading brand prefix. Returns (remainder, stripped)."""
    value = (name or "").strip()
    lowered = value.lower()
    for prefix in BRAND_PREFIXES:
        if lowered.startswith(prefix.lower() + " "):
            return value[len(prefix) + 1 :].strip(), True
    return value, False


def match_material_token(token: str) -> str | None:
    """Return the canonical spelling of ``token`` if it is a known material."""
    upper = token.upper()
    for material in MATERIAL_TOKENS:
        if material.upper() == upper:
            return material
    return None


def material_type_hint(display_name: str) -> str:
    """Best-effort material type for a product display name.

    "Bambu PLA Matte" -> "PLA", "Bambu PETG-CF" -> "PETG-CF". Names without a
    brand prefix are returned unchanged so that a bare material type passed as
    a name still works as a lookup key.
    """
    remainder, stripped = strip_brand_prefix(display_name)
    if not stripped:
        return remainder
    tokens = remainder.split()
    for token in tokens:
        material = match_material_token(token)
        if material:
            return material
    return tokens[0] if tokens else ""
