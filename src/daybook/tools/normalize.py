"""
Daybook - Name Normalization.

Utilities for normalizing ingredient names and units for grocery merging.
"""


def normalize_name(name: str | None) -> str:
    """
    Normalize an ingredient name for matching.

    Operations:
    - Lowercase
    - Strip leading/trailing whitespace

    Inner whitespace is left alone: "green  pepper" and "green pepper"
    are different keys.

    Examples:
        normalize_name("  Tomato ") -> "tomato"
        normalize_name("TOMATO") -> "tomato"
    """
    return (name or "").lower().strip()


def normalize_unit(unit: str | None) -> str:
    """
    Normalize a unit for matching.

    Missing units normalize to the empty string so that "2 eggs" with
    unit None and unit "" share a key.

    Examples:
        normalize_unit("PCS ") -> "pcs"
        normalize_unit(None) -> ""
    """
    return (unit or "").lower().strip()


def grocery_key(name: str | None, unit: str | None) -> tuple[str, str]:
    """Merge key for an ingredient row: (normalized name, normalized unit)."""
    return normalize_name(name), normalize_unit(unit)


def format_quantity(qty: float | None) -> str:
    """
    Format a quantity for display.

    Whole numbers print without decimals. None and 0 print as "".

    Examples:
        format_quantity(2.0) -> "2"
        format_quantity(3.5) -> "3.5"
        format_quantity(None) -> ""
    """
    if not qty:
        return ""
    if float(qty).is_integer():
        return str(int(qty))
    return f"{qty:g}"
