from datetime import UTC, datetime

import pytest

from student_records.core.errors import ValidationFailed
from student_records.models.student import District
from student_records.services.validation import (
    parse_birth_date,
    validate_create,
    validate_patch,
)

TODAY = datetime(2025, 6, 15, 13, 30, tzinfo=UTC)


def _fields(payload, *, partial=False):
    validate = validate_patch if partial else validate_create
    with pytest.raises(ValidationFailed) as exc_info:
        validate(payload, today=TODAY)
    return exc_info.value.fields


def test_create_normalizes_values(make_payload):
    payload = make_payload(
        name={"first": "  Avery ", "middle": "   ", "last": "Johnson "},
        address={"line2": " Apt 4 "},
        email="  Avery.Johnson@School.ORG ",
        contactNumber=" 0123456789 ",
    )
    values = validate_create(payload, today=TODAY)

    assert values["name.first"] == "Avery"
    assert values["name.last"] == "Johnson"
    assert "name.middle" not in values
    assert values["address.line2"] == "Apt 4"
    assert values["address.district"] is District.NORTH
    assert values["contactNumber"] == "0123456789"
    assert values["email"] == "avery.johnson@school.org"
    assert values["birthDate"] == datetime(2010, 5, 1, tzinfo=UTC)


def test_create_reports_missing_fields():
    fields = _fields({"name": {"first": "Avery"}})
    assert fields["name.last"] == "Required"
    assert fields["birthDate"] == "Required"
    assert fields["address"] == "Required"
    assert fields["contactNumber"] == "Required"
    assert "email" not in fields


def test_non_object_payload_is_rejected():
    assert _fields(["not", "an", "object"]) == {"root": "Expected object"}


def test_wrong_types_are_reported(make_payload):
    fields = _fields(make_payload(name="Avery", contactNumber=123456789))
    assert fields["name"] == "Expected object"
    assert fields["contactNumber"] == "Expected string"


@pytest.mark.parametrize(
    "first,message",
    [
        ("A", "First name must be at least 2 characters"),
        ("A" * 51, "First name must be at most 50 characters"),
        ("Av3ry", "Alphabets only"),
        ("Mary Ann", "Alphabets only"),
    ],
)
def test_first_name_rules(make_payload, first, message):
    assert _fields(make_payload(name={"first": first}))["name.first"] == message


def test_one_message_per_path_first_rule_wins(make_payload):
    # "1" breaks both the length and the alphabet rule
    fields = _fields(make_payload(name={"first": "1", "last": "2"}))
    assert fields["name.first"] == "First name must be at least 2 characters"
    assert fields["name.last"] == "Last name must be at least 2 characters"


def test_middle_name_must_be_alphabetic(make_payload):
    fields = _fields(make_payload(name={"middle": "J."}))
    assert fields == {"name.middle": "Alphabets only"}


@pytest.mark.parametrize(
    "value,message",
    [
        ("2010-13-40", "Invalid birth date"),
        ("yesterday", "Invalid birth date"),
        ("2025-06-15", "Birth date must be in the past"),
        ("2030-01-01", "Birth date must be in the past"),
    ],
)
def test_birth_date_rules(make_payload, value, message):
    assert _fields(make_payload(birthDate=value))["birthDate"] == message


def test_birth_date_day_before_today_is_valid(make_payload):
    values = validate_create(make_payload(birthDate="2025-06-14"), today=TODAY)
    assert values["birthDate"] == datetime(2025, 6, 14, tzinfo=UTC)


def test_parse_birth_date_is_utc_midnight():
    assert parse_birth_date("2010-05-01") == datetime(2010, 5, 1, tzinfo=UTC)
    assert parse_birth_date("2010-5-1") is None


def test_address_rules(make_payload):
    fields = _fields(
        make_payload(
            address={
                "line1": "12 R",
                "line2": "x" * 101,
                "city": "S",
                "district": "Northern",
            }
        )
    )
    assert fields == {
        "address.line1": "Address line 1 must be at least 5 characters",
        "address.line2": "Address line 2 is too long",
        "address.city": "City must be at least 2 characters",
        "address.district": "District must be selected from the list",
    }


def test_city_must_be_alphabetic(make_payload):
    fields = _fields(make_payload(address={"city": "New York"}))
    assert fields == {"address.city": "Alphabets only"}


@pytest.mark.parametrize("number", ["012345678", "01234567890", "012345678a", "012-345-6789"])
def test_contact_number_rules(make_payload, number):
    fields = _fields(make_payload(contactNumber=number))
    assert fields == {"contactNumber": "Contact number must be exactly 10 digits"}


def test_email_rules(make_payload):
    assert _fields(make_payload(email="not-an-email")) == {"email": "Invalid email"}


def test_empty_email_is_dropped_on_create(make_payload):
    values = validate_create(make_payload(email=""), today=TODAY)
    assert "email" not in values


def test_patch_checks_only_present_fields():
    values = validate_patch({"contactNumber": "9876543210"}, today=TODAY)
    assert values == {"contactNumber": "9876543210"}


def test_patch_with_nothing_recognized_is_empty():
    assert validate_patch({"nickname": "Ave"}, today=TODAY) == {}


def test_patch_keeps_blank_optional_fields():
    values = validate_patch(
        {"name": {"middle": " "}, "address": {"line2": ""}, "email": ""}, today=TODAY
    )
    assert values == {"name.middle": "", "address.line2": "", "email": ""}


def test_patch_rejects_blank_required_field():
    fields = _fields({"name": {"first": "  "}}, partial=True)
    assert fields == {"name.first": "First name must be at least 2 characters"}


def test_patch_validates_nested_district():
    fields = _fields({"address": {"district": "Nowhere"}}, partial=True)
    assert fields == {"address.district": "District must be selected from the list"}
