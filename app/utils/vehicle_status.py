# app/utils/vehicle_status.py
"""
Vehicle status classification for public and admin views.

Every status is assigned exactly one public category in ``_PUBLIC_CATEGORY``;
the arriving-soon / arrived / reserved / hidden sets are derived from it, so
they are disjoint by construction. The check at the bottom of the module
fails the import if a ``VehicleStatus`` member is left unclassified.

All functions accept either a ``VehicleStatus`` or the raw stored string.
Strings outside the enum (stale rows, typos) never raise: they are publicly
visible, have no public label and fall back to the ``unknown`` category.
"""

from typing import Optional, Union

from app.models.enums.vehicle_status import (
    PublicStatusCategory,
    StatusGroup,
    VehicleStatus,
)

StatusLike = Union[VehicleStatus, str, None]

_PUBLIC_CATEGORY: dict[VehicleStatus, PublicStatusCategory] = {
    VehicleStatus.auction_won: PublicStatusCategory.arriving_soon,
    VehicleStatus.payment_processing: PublicStatusCategory.arriving_soon,
    VehicleStatus.pickup_scheduled: PublicStatusCategory.arriving_soon,
    VehicleStatus.in_transit_to_port: PublicStatusCategory.arriving_soon,
    VehicleStatus.at_port: PublicStatusCategory.arriving_soon,
    VehicleStatus.shipped: PublicStatusCategory.arriving_soon,
    VehicleStatus.in_transit: PublicStatusCategory.arriving_soon,
    VehicleStatus.at_uae_port: PublicStatusCategory.arriving_soon,
    VehicleStatus.customs_clearance: PublicStatusCategory.arriving_soon,
    VehicleStatus.released_from_customs: PublicStatusCategory.arriving_soon,
    VehicleStatus.in_transit_to_yard: PublicStatusCategory.arriving_soon,
    VehicleStatus.at_yard: PublicStatusCategory.arrived,
    VehicleStatus.under_enhancement: PublicStatusCategory.arrived,
    VehicleStatus.ready_for_sale: PublicStatusCategory.arrived,
    VehicleStatus.reserved: PublicStatusCategory.reserved,
    VehicleStatus.sold: PublicStatusCategory.hidden,
    VehicleStatus.delivered: PublicStatusCategory.hidden,
}


def _members(category: PublicStatusCategory) -> frozenset[VehicleStatus]:
    return frozenset(s for s, c in _PUBLIC_CATEGORY.items() if c is category)


ARRIVING_SOON_STATUSES = _members(PublicStatusCategory.arriving_soon)
ARRIVED_STATUSES = _members(PublicStatusCategory.arrived)
RESERVED_STATUSES = _members(PublicStatusCategory.reserved)
HIDDEN_STATUSES = _members(PublicStatusCategory.hidden)

_PUBLIC_LABELS = {
    PublicStatusCategory.arriving_soon: "Arriving Soon",
    PublicStatusCategory.arrived: "Arrived",
    PublicStatusCategory.reserved: "Reserved",
}

_BADGE_COLORS = {
    PublicStatusCategory.arriving_soon: "blue",
    PublicStatusCategory.arrived: "emerald",
    PublicStatusCategory.reserved: "amber",
    PublicStatusCategory.unknown: "gray",
}

_BADGE_CLASSES = {
    PublicStatusCategory.arriving_soon: "bg-brand-blue-100 text-brand-blue-800 border-brand-blue-200",
    PublicStatusCategory.arrived: "bg-emerald-100 text-emerald-800 border-emerald-200",
    PublicStatusCategory.reserved: "bg-amber-100 text-amber-800 border-amber-200",
    PublicStatusCategory.unknown: "bg-gray-100 text-gray-800 border-gray-200",
}

_GROUP_STATUSES = {
    StatusGroup.arrived: ARRIVED_STATUSES,
    StatusGroup.arriving_soon: ARRIVING_SOON_STATUSES,
    StatusGroup.all: ARRIVING_SOON_STATUSES | ARRIVED_STATUSES | RESERVED_STATUSES,
}


def _category(status: StatusLike) -> PublicStatusCategory:
    try:
        return _PUBLIC_CATEGORY[VehicleStatus(status)]
    except (ValueError, TypeError):
        return PublicStatusCategory.unknown


# =====================================================
# PUBLIC SITE
# =====================================================
def classify_for_public(status: StatusLike) -> Optional[str]:
    """Public label, or None for hidden and unmapped statuses.

    None does not imply hidden; check is_publicly_visible() as well.
    """
    return _PUBLIC_LABELS.get(_category(status))


def is_publicly_visible(status: StatusLike) -> bool:
    return _category(status) is not PublicStatusCategory.hidden


def badge_style_category(status: StatusLike) -> str:
    """One of arriving-soon, arrived, reserved, unknown.

    Hidden statuses report unknown; they are filtered out before rendering.
    """
    category = _category(status)
    if category is PublicStatusCategory.hidden:
        category = PublicStatusCategory.unknown
    return category.value


def badge_style_classes(status: StatusLike) -> str:
    return _BADGE_CLASSES[PublicStatusCategory(badge_style_category(status))]


def group_of(status: StatusLike) -> StatusGroup:
    # reserved and hidden statuses land in the catch-all group
    category = _category(status)
    if category is PublicStatusCategory.arrived:
        return StatusGroup.arrived
    if category is PublicStatusCategory.arriving_soon:
        return StatusGroup.arriving_soon
    return StatusGroup.all


def statuses_for_group(group: Union[StatusGroup, str]) -> frozenset[VehicleStatus]:
    """Statuses behind a filter tab. ``all`` never includes hidden statuses.

    Unknown group names resolve to ``all``.
    """
    try:
        return _GROUP_STATUSES[StatusGroup(group)]
    except ValueError:
        return _GROUP_STATUSES[StatusGroup.all]


def hidden_statuses() -> frozenset[VehicleStatus]:
    return HIDDEN_STATUSES


# =====================================================
# ADMIN
# =====================================================
def format_admin_status(status: StatusLike) -> str:
    """at_uae_port -> At Uae Port"""
    if not status:
        return ""
    raw = status.value if isinstance(status, VehicleStatus) else str(status)
    return " ".join(word[:1].upper() + word[1:] for word in raw.split("_"))


def status_color_info(status: StatusLike) -> dict:
    category = PublicStatusCategory(badge_style_category(status))
    return {
        "category": category.value,
        "color": _BADGE_COLORS[category],
        "label": _PUBLIC_LABELS.get(category) or format_admin_status(status),
    }


def describe_status(status: StatusLike) -> dict:
    raw = status.value if isinstance(status, VehicleStatus) else status
    color = status_color_info(status)
    return {
        "value": raw,
        "admin_label": format_admin_status(status),
        "public_label": classify_for_public(status),
        "is_publicly_visible": is_publicly_visible(status),
        "badge_category": color["category"],
        "badge_color": color["color"],
        "group": group_of(status).value,
    }


_unclassified = set(VehicleStatus) - set(_PUBLIC_CATEGORY)
if _unclassified:
    raise RuntimeError(
        "Vehicle statuses without a public category: "
        + ", ".join(sorted(s.value for s in _unclassified))
    )
