"""Load unit conversion between pounds and kilograms."""

from liftengine.coercion import to_float

KG_PER_LB = 0.45359237

SUPPORTED_UNITS = ("lbs", "kg")


def lbs_to_kg(lbs) -> float | None:
    value = to_float(lbs)
    return None if value is None else value * KG_PER_LB


def kg_to_lbs(kg) -> float | None:
    value = to_float(kg)
    return None if value is None else value / KG_PER_LB


def convert_load(value, from_unit: str, to_unit: str) -> float | None:
    """
    Convert ``value`` between "lbs" and "kg". Same-unit conversion returns
    the value unchanged; unknown units raise ValueError.
    """
    for unit in (from_unit, to_unit):
        if unit not in SUPPORTED_UNITS:
            raise ValueError(f"Unsupported unit '{unit}'. Use one of: {', '.join(SUPPORTED_UNITS)}.")
    if from_unit == to_unit:
        return to_float(value)
    if from_unit == "lbs":
        return lbs_to_kg(value)
    return kg_to_lbs(value)
