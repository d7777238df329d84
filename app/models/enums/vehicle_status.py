# app/models/enums/vehicle_status.py
import enum


class VehicleStatus(str, enum.Enum):
    """Lifecycle of an imported vehicle, auction win through delivery.

    Declaration order is the order a vehicle normally moves through; nothing
    enforces it.
    """

    auction_won = "auction_won"
    payment_processing = "payment_processing"
    pickup_scheduled = "pickup_scheduled"
    in_transit_to_port = "in_transit_to_port"
    at_port = "at_port"
    shipped = "shipped"
    in_transit = "in_transit"
    at_uae_port = "at_uae_port"
    customs_clearance = "customs_clearance"
    released_from_customs = "released_from_customs"
    in_transit_to_yard = "in_transit_to_yard"
    at_yard = "at_yard"
    under_enhancement = "under_enhancement"
    ready_for_sale = "ready_for_sale"
    reserved = "reserved"
    sold = "sold"
    delivered = "delivered"


class StatusGroup(str, enum.Enum):
    """Coarse bucket behind the public inventory tabs. Never persisted."""

    all = "all"
    arrived = "arrived"
    arriving_soon = "arriving_soon"


class PublicStatusCategory(str, enum.Enum):
    arriving_soon = "arriving-soon"
    arrived = "arrived"
    reserved = "reserved"
    hidden = "hidden"
    unknown = "unknown"


class DamageSeverity(str, enum.Enum):
    minor = "minor"
    moderate = "moderate"
    major = "major"
    total_loss = "total_loss"


class SaleType(str, enum.Enum):
    local_only = "local_only"
    export_only = "export_only"
    local_and_export = "local_and_export"
