import pytest

from app.models.enums.vehicle_status import VehicleStatus, StatusGroup
from app.utils.vehicle_status import (
    ARRIVED_STATUSES,
    ARRIVING_SOON_STATUSES,
    HIDDEN_STATUSES,
    RESERVED_STATUSES,
    badge_style_category,
    badge_style_classes,
    classify_for_public,
    describe_status,
    format_admin_status,
    group_of,
    hidden_statuses,
    is_publicly_visible,
    status_color_info,
    statuses_for_group,
)

S = VehicleStatus


@pytest.mark.parametrize(
    "status, label, visible, badge, group",
    [
        ("auction_won", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("payment_processing", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("pickup_scheduled", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("in_transit_to_port", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("at_port", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("shipped", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("in_transit", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("at_uae_port", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("customs_clearance", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("released_from_customs", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("in_transit_to_yard", "Arriving Soon", True, "arriving-soon", "arriving_soon"),
        ("at_yard", "Arrived", True, "arrived", "arrived"),
        ("under_enhancement", "Arrived", True, "arrived", "arrived"),
        ("ready_for_sale", "Arrived", True, "arrived", "arrived"),
        ("reserved", "Reserved", True, "reserved", "all"),
        ("sold", None, False, "unknown", "all"),
        ("delivered", None, False, "unknown", "all"),
    ],
)
def test_classification_table(status, label, visible, badge, group):
    assert classify_for_public(status) == label
    assert is_publicly_visible(status) is visible
    assert badge_style_category(status) == badge
    assert group_of(status).value == group


def test_table_covers_every_status():
    assert len(VehicleStatus) == 17
    classified = ARRIVING_SOON_STATUSES | ARRIVED_STATUSES | RESERVED_STATUSES | HIDDEN_STATUSES
    assert classified == set(VehicleStatus)


def test_sets_are_pairwise_disjoint():
    sets = [ARRIVING_SOON_STATUSES, ARRIVED_STATUSES, RESERVED_STATUSES, HIDDEN_STATUSES]
    for i, a in enumerate(sets):
        for b in sets[i + 1:]:
            assert not a & b


def test_hidden_statuses_never_in_arrival_sets():
    for status in VehicleStatus:
        if not is_publicly_visible(status):
            assert status not in ARRIVING_SOON_STATUSES
            assert status not in ARRIVED_STATUSES


def test_statuses_for_group():
    assert statuses_for_group("arrived") == {S.at_yard, S.under_enhancement, S.ready_for_sale}
    assert statuses_for_group(StatusGroup.arriving_soon) == ARRIVING_SOON_STATUSES

    everything = statuses_for_group("all")
    assert len(everything) == 15
    assert everything == ARRIVING_SOON_STATUSES | ARRIVED_STATUSES | RESERVED_STATUSES
    assert not everything & hidden_statuses()


def test_unknown_group_falls_back_to_all():
    assert statuses_for_group("bogus") == statuses_for_group("all")


def test_enum_and_string_inputs_agree():
    for status in VehicleStatus:
        assert describe_status(status) == describe_status(status.value)


@pytest.mark.parametrize("raw", ["", "teleported", None])
def test_unknown_status_degrades_without_raising(raw):
    assert classify_for_public(raw) is None
    assert is_publicly_visible(raw) is True
    assert badge_style_category(raw) == "unknown"
    assert group_of(raw) is StatusGroup.all
    assert "gray" in badge_style_classes(raw)


def test_functions_are_idempotent():
    for status in list(VehicleStatus) + ["teleported"]:
        assert classify_for_public(status) == classify_for_public(status)
        assert group_of(status) == group_of(status)
        assert status_color_info(status) == status_color_info(status)


def test_format_admin_status():
    assert format_admin_status("at_uae_port") == "At Uae Port"
    assert format_admin_status(S.ready_for_sale) == "Ready For Sale"
    assert format_admin_status(None) == ""


def test_status_color_info_uses_admin_label_for_hidden():
    info = status_color_info("sold")
    assert info == {"category": "unknown", "color": "gray", "label": "Sold"}
    assert status_color_info("at_yard")["color"] == "emerald"
