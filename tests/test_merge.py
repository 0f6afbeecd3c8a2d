import pytest

from fri.models import DEFAULT_STATUS, UNSPECIFIED_NAME, ReportCandidate
from fri.pipeline.merge import (
    HelpCategorySet,
    build_new_report,
    build_report_fields,
    build_report_update,
    coerce_count,
    coerce_urgency,
    parse_coordinate,
    resolve_name,
    split_help_categories,
    split_phone_input,
)


def _candidate(**overrides) -> ReportCandidate:
    payload = {
        "name": "สมชาย",
        "lastname": "ใจดี",
        "address": "123 หมู่ 5 ต.บางกระทุ่ม อ.เมือง จ.เชียงใหม่",
        "phone": ["0812345678"],
        "number_of_adults": 3,
        "number_of_children": 2,
        "help_needed": "ต้องการเรือด่วน",
        "help_categories": ["evacuation"],
        "urgency_level": 3,
    }
    payload.update(overrides)
    return ReportCandidate.model_validate(payload)


@pytest.mark.parametrize("value", [None, "", "   ", "-", " - "])
def test_resolve_name_uses_sentinel_for_blank_or_dash(value):
    assert resolve_name(value) == UNSPECIFIED_NAME


def test_resolve_name_passes_real_names_through():
    assert resolve_name("สมชาย") == "สมชาย"


def test_build_report_fields_defaults_missing_name():
    assert build_report_fields(_candidate(name="-")).name == UNSPECIFIED_NAME
    payload = _candidate().model_dump(exclude={"name"})
    assert build_report_fields(ReportCandidate.model_validate(payload)).name == UNSPECIFIED_NAME


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0),
        ("abc", 0),
        ("", 0),
        ("5 คน", 5),
        ("12", 12),
        (3.7, 3),
        (-2, 0),
        ("-4", 0),
        (True, 0),
        (float("nan"), 0),
        ([1], 0),
    ],
)
def test_coerce_count(value, expected):
    assert coerce_count(value) == expected


def test_build_report_fields_coerces_counts():
    fields = build_report_fields(
        _candidate(number_of_adults="abc", number_of_children=None, number_of_seniors="2")
    )
    assert fields.number_of_adults == 0
    assert fields.number_of_children == 0
    assert fields.number_of_seniors == 2
    assert fields.number_of_infants == 0
    assert fields.number_of_patients == 0


def test_split_phone_input_formats_and_drops_empty_entries():
    assert split_phone_input("081-111-1111, 0822222222") == ["081-111-1111", "082-222-2222"]
    assert split_phone_input("0811111111, , ") == ["081-111-1111"]
    assert split_phone_input("") == []
    assert split_phone_input(None) == []


def test_split_phone_input_keeps_order_and_duplicates():
    assert split_phone_input(["0822222222", "0811111111, 0822222222"]) == [
        "082-222-2222",
        "081-111-1111",
        "082-222-2222",
    ]


def test_build_report_update_prefers_phone_text_field():
    fields = build_report_update(_candidate(phone=["0899999999"]), "081-111-1111, 0822222222")
    assert fields.phone == ["081-111-1111", "082-222-2222"]


def test_build_report_update_falls_back_to_candidate_phones():
    fields = build_report_update(_candidate(phone=["0899999999"]))
    assert fields.phone == ["089-999-9999"]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("13.7563", 13.7563),
        (13.7563, 13.7563),
        (0, 0.0),
        ("", None),
        ("   ", None),
        (None, None),
        ("abc", None),
        ("95", None),
        ("nan", None),
        (True, None),
    ],
)
def test_parse_coordinate_latitude(value, expected):
    assert parse_coordinate(value, 90.0) == expected


def test_build_report_fields_parses_location():
    fields = build_report_fields(_candidate(location_lat="18.7883", location_long="not a number"))
    assert fields.location_lat == pytest.approx(18.7883)
    assert fields.location_long is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 1), ("", 1), (0, 1), (1, 1), ("3", 3), (5, 5), (9, 5), ("วิกฤต", 1), (4.0, 4)],
)
def test_coerce_urgency_clamps_to_levels(value, expected):
    assert coerce_urgency(value) == expected


def test_help_category_set_toggles_without_duplicates():
    categories = HelpCategorySet(["food", "food", "water"])
    assert categories.to_list() == ["food", "water"]

    categories.toggle("medical", True)
    categories.toggle("medical", True)
    assert categories.to_list() == ["food", "water", "medical"]

    categories.toggle("food", False)
    categories.remove("missing")
    assert categories.to_list() == ["water", "medical"]
    assert "water" in categories
    assert len(categories) == 2


def test_split_help_categories_moves_unknown_tags_to_additional_info():
    known, unknown = split_help_categories(["food", "boat", "food", " ", "boat"])
    assert known.to_list() == ["food"]
    assert unknown == ["boat"]

    fields = build_report_fields(
        _candidate(help_categories=["food", "boat"], additional_info="บ้านสองชั้น")
    )
    assert fields.help_categories == ["food"]
    assert fields.additional_info == "บ้านสองชั้น\nboat"


def test_build_report_fields_text_defaults():
    fields = build_report_fields(ReportCandidate())
    assert fields.name == UNSPECIFIED_NAME
    assert fields.lastname == ""
    assert fields.reporter_name == ""
    assert fields.health_condition == ""
    assert fields.additional_info == ""
    assert fields.map_link is None
    assert fields.location_lat is None
    assert fields.phone == []
    assert fields.help_categories == []
    assert fields.urgency_level == 1
    assert fields.status == DEFAULT_STATUS


def test_build_report_fields_keeps_map_link_and_status():
    fields = build_report_fields(
        _candidate(map_link="https://maps.google.com/?q=18.78,98.98", status="rescued")
    )
    assert fields.map_link == "https://maps.google.com/?q=18.78,98.98"
    assert fields.status == "rescued"
    assert build_report_fields(_candidate(map_link="", status="")).map_link is None


def test_build_new_report_keeps_normalized_raw_message():
    raw = "  ด่วน!\u200b   ขอความช่วยเหลือ\nโทร 081-234-5678  "
    report = build_new_report(_candidate(), raw)
    assert report.raw_message == "ด่วน! ขอความช่วยเหลือ\nโทร 081-234-5678"
    assert report.phone == ["081-234-5678"]


def test_build_report_update_never_carries_raw_message():
    fields = build_report_update(_candidate(), "0812345678")
    assert "raw_message" not in fields.model_dump()
    assert "raw_message" not in fields.column_values()
