from __future__ import annotations

from plant_inventory.schemas.inventory import StockStatus

_SERIES_PREFIXES = ("60", "62", "63", "68", "69")
_SELF_ALIGNING = ("12", "13", "22", "23")


# PUBLIC_INTERFACE
def classify_series(name: str) -> str:
    """
    Derive a display series from an item code, e.g. '6204-2RS' -> 'Series 62xx'.

    Prefix rules are checked in order; the first match wins.
    """
    code = name.upper().strip()
    prefix = code[:2]
    if code.startswith("HTD"):
        return "Belts"
    if code.startswith("HK"):
        return "Needle bearings"
    if code.startswith("H"):
        return "Adapter sleeves"
    if code.startswith("6") and prefix in _SERIES_PREFIXES:
        return f"Series {prefix}xx"
    if code.startswith("UC"):
        return "UC series (inserts)"
    if prefix in _SELF_ALIGNING:
        return f"Series {prefix}xx (self-aligning)"
    if prefix in ("30", "32"):
        return f"Series {prefix}xxx (tapered rollers)"
    if code.startswith(("NK", "RNA")):
        return "Needle bearings"
    if code.startswith(("PHS", "POS")):
        return "Rod ends"
    if code.startswith("AEVU"):
        return "Pistons"
    return "Other"


# PUBLIC_INTERFACE
def stock_status(stock: int, threshold: int) -> StockStatus:
    """Out of stock at zero, low below threshold, otherwise in stock."""
    if stock == 0:
        return StockStatus.out_of_stock
    if stock < threshold:
        return StockStatus.low_stock
    return StockStatus.in_stock
