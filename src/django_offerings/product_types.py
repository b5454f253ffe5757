"""Built-in product type plugins.

One validator/renderer pair per ProductType value. Validators take the
draft's product_config dict and return a field -> error message map.
"""

from .choices import ProductType
from .fields import as_int, is_blank, is_positive_int
from .registry import ProductTypePlugin, ProductTypeRegistry


# =============================================================================
# Seat-based (bus tours)
# =============================================================================


def validate_seat_config(config: dict) -> dict[str, str]:
    errors = {}
    if not is_positive_int(config.get("total_seats")):
        errors["total_seats"] = "Total seats must be at least 1"

    accessible = as_int(config.get("accessible_seats"))
    total = as_int(config.get("total_seats"))
    if accessible is not None and total is not None and accessible > total:
        errors["accessible_seats"] = "Accessible seats cannot exceed total seats"

    locations = config.get("pickup_locations") or []
    if not locations:
        errors["pickup_locations"] = "At least one pickup location is required"
    for i, location in enumerate(locations):
        if not isinstance(location, dict):
            errors[f"pickup_locations[{i}]"] = "Pickup location must be an object"
            continue
        if is_blank(location.get("name")):
            errors[f"pickup_locations[{i}].name"] = "Pickup location name is required"
        if is_blank(location.get("pickup_time")):
            errors[f"pickup_locations[{i}].pickup_time"] = "Pickup time is required"
    return errors


def render_seat_config(config: dict) -> str:
    seats = as_int(config.get("total_seats")) or 0
    stops = len(config.get("pickup_locations") or [])
    vehicle = config.get("vehicle_type") or "vehicle"
    return f"{seats} seats on {vehicle}, {stops} pickup location{'s' if stops != 1 else ''}"


# =============================================================================
# Capacity-based (boat cruises)
# =============================================================================


def validate_capacity_config(config: dict) -> dict[str, str]:
    errors = {}
    capacity = as_int(config.get("max_capacity"))
    if capacity is None or capacity < 1:
        errors["max_capacity"] = "Maximum capacity must be at least 1"

    min_group = config.get("min_group_size")
    if min_group not in (None, ""):
        min_size = as_int(min_group)
        if min_size is None or min_size < 1:
            errors["min_group_size"] = "Minimum group size must be at least 1"
        elif capacity is not None and min_size > capacity:
            errors["min_group_size"] = "Minimum group size cannot exceed maximum capacity"
    return errors


def render_capacity_config(config: dict) -> str:
    capacity = as_int(config.get("max_capacity")) or 0
    vessel = config.get("vessel_type") or "vessel"
    return f"Up to {capacity} guests on {vessel}"


# =============================================================================
# Open capacity (walking tours, activities)
# =============================================================================


def validate_open_config(config: dict) -> dict[str, str]:
    errors = {}
    if is_blank(config.get("main_meeting_point")):
        errors["main_meeting_point"] = "Meeting point is required"

    max_group = config.get("max_group_size")
    if max_group not in (None, "") and not is_positive_int(max_group):
        errors["max_group_size"] = "Maximum group size must be at least 1"
    return errors


def render_open_config(config: dict) -> str:
    return f"Meets at {config.get('main_meeting_point') or 'TBD'}"


# =============================================================================
# Equipment rental
# =============================================================================


def validate_equipment_config(config: dict) -> dict[str, str]:
    errors = {}
    if is_blank(config.get("equipment_category")):
        errors["equipment_category"] = "Equipment category is required"
    if not is_positive_int(config.get("total_inventory")):
        errors["total_inventory"] = "Total inventory must be at least 1"
    return errors


def render_equipment_config(config: dict) -> str:
    inventory = as_int(config.get("total_inventory")) or 0
    return f"{inventory} x {config.get('equipment_category') or 'equipment'}"


# =============================================================================
# Multi-activity packages
# =============================================================================


def validate_package_config(config: dict) -> dict[str, str]:
    errors = {}
    if is_blank(config.get("package_type")):
        errors["package_type"] = "Package type is required"
    if not is_positive_int(config.get("minimum_participants")):
        errors["minimum_participants"] = "Minimum participants must be at least 1"
    return errors


def render_package_config(config: dict) -> str:
    minimum = as_int(config.get("minimum_participants")) or 0
    return f"{config.get('package_type') or 'Package'} (min. {minimum} participants)"


# =============================================================================
# Timeslot (classes and workshops)
# =============================================================================


def validate_timeslot_config(config: dict) -> dict[str, str]:
    errors = {}
    if is_blank(config.get("class_type")):
        errors["class_type"] = "Class type is required"
    if not is_positive_int(config.get("max_class_size")):
        errors["max_class_size"] = "Maximum class size must be at least 1"
    if not is_positive_int(config.get("session_duration")):
        errors["session_duration"] = "Session duration must be at least 1 minute"
    return errors


def render_timeslot_config(config: dict) -> str:
    size = as_int(config.get("max_class_size")) or 0
    minutes = as_int(config.get("session_duration")) or 0
    return f"{config.get('class_type') or 'Class'}: {size} per session, {minutes} min"


BUILTIN_PLUGINS: tuple[ProductTypePlugin, ...] = (
    ProductTypePlugin(
        name=ProductType.SEAT.value,
        label=ProductType.SEAT.label,
        validator=validate_seat_config,
        renderer=render_seat_config,
        description="Fixed seating with pickup locations",
        category="Transportation & Tours",
    ),
    ProductTypePlugin(
        name=ProductType.CAPACITY.value,
        label=ProductType.CAPACITY.label,
        validator=validate_capacity_config,
        renderer=render_capacity_config,
        description="Total capacity limits with group pricing",
        category="Transportation & Tours",
    ),
    ProductTypePlugin(
        name=ProductType.OPEN.value,
        label=ProductType.OPEN.label,
        validator=validate_open_config,
        renderer=render_open_config,
        description="Open capacity with per-person pricing",
        category="Transportation & Tours",
    ),
    ProductTypePlugin(
        name=ProductType.EQUIPMENT.value,
        label=ProductType.EQUIPMENT.label,
        validator=validate_equipment_config,
        renderer=render_equipment_config,
        description="Gear and equipment rentals",
    ),
    ProductTypePlugin(
        name=ProductType.PACKAGE.value,
        label=ProductType.PACKAGE.label,
        validator=validate_package_config,
        renderer=render_package_config,
        description="Combine multiple offerings",
        category="Packages & Bundles",
    ),
    ProductTypePlugin(
        name=ProductType.TIMESLOT.value,
        label=ProductType.TIMESLOT.label,
        validator=validate_timeslot_config,
        renderer=render_timeslot_config,
        description="Scheduled sessions with instructors",
    ),
)


def register_builtin_product_types() -> None:
    """Register (or re-register after a clear) the six built-in types."""
    for plugin in BUILTIN_PLUGINS:
        ProductTypeRegistry.register(plugin)


register_builtin_product_types()
