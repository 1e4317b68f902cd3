from datetime import date, datetime
from decimal import Decimal

import pytest

from rowguard.validation import CHECKERS, CheckType, get_checker
from rowguard.validation.checkers import (
    check_bool,
    check_date,
    check_datetime,
    check_email,
    check_float,
    check_int,
    check_money,
    check_percentage,
    check_phone,
    check_shortname,
    check_template,
    check_text,
    check_time,
)


def run(checker, value):
    return checker(None, value, "column")


def test_registry_covers_every_check_type():
    assert set(CHECKERS) == set(CheckType)
    assert CHECKERS[CheckType.INTEGER] is CHECKERS[CheckType.INT]
    assert get_checker("email") is check_email
    assert get_checker("nope") is None


@pytest.mark.parametrize("value", ["0", "42", 7, "007", 3.0])
def test_int_accepts_digits(value):
    assert run(check_int, value) is None


@pytest.mark.parametrize("value", ["-1", "1.5", "12a", " 3", 2.5])
def test_int_rejects_non_digits(value):
    assert run(check_int, value) == "Not a valid number"


def test_float_requires_fraction():
    assert run(check_float, "3.14") is None
    assert run(check_float, "3") == "Not a valid number"
    assert run(check_float, "-3.14") == "Not a valid number"
    assert run(check_float, ".5") == "Not a valid number"


@pytest.mark.parametrize("value", ["10", "10.50", "$10.50", Decimal("4.99")])
def test_money_accepts_amounts(value):
    assert run(check_money, value) is None


@pytest.mark.parametrize("value", ["ten", "10.", "10.5x"])
def test_money_rejects_non_amounts(value):
    assert run(check_money, value) == "Not a valid dollar amount"


@pytest.mark.parametrize("value", [0, 1, "0", "1", "1.0", True, False])
def test_bool_accepts_zero_and_one(value):
    assert run(check_bool, value) is None


@pytest.mark.parametrize("value", [2, "yes", "", "-1"])
def test_bool_rejects_other_values(value):
    assert run(check_bool, value) == "Not a valid boolean"


def test_shortname():
    assert run(check_shortname, "my-page_2") is None
    assert run(check_shortname, "my page") == "Only letters, numbers, (-) and (_) are allowed"
    assert run(check_shortname, "") == "Only letters, numbers, (-) and (_) are allowed"


def test_email():
    assert run(check_email, "happy@sad.net") is None
    assert run(check_email, "not-an-email") == "Invalid E-Mail address"
    assert run(check_email, "two@@signs.org") == "Invalid E-Mail address"


@pytest.mark.parametrize("value", ["0", "55", "100", "40%", 75, "1e1"])
def test_percentage_accepts_range(value):
    assert run(check_percentage, value) is None


@pytest.mark.parametrize("value", ["101", "abc", "-5", "%40", "5e3", "1.5E+3"])
def test_percentage_rejects_out_of_range(value):
    assert run(check_percentage, value) == "Requires a whole number between 0-100"


def test_template_accepts_valid_fragment():
    assert run(check_template, "Hello {{ name }}!") is None
    assert run(check_template, "{% for x in items %}{{ x }}{% endfor %}") is None


def test_template_renders_undefined_variables_as_empty():
    assert run(check_template, "{{ foo.bar }}") is None
    assert run(check_template, "Hi {{ user.name | upper }}") is None


def test_template_reports_syntax_errors():
    assert run(check_template, "Hello {% if %}")
    assert run(check_template, "{{ unclosed")


def test_template_blocks_unsafe_attribute_access():
    message = run(check_template, "{{ ''.__class__.__subclasses__() }}")
    assert message is not None


def test_text_always_passes():
    assert run(check_text, "anything at all") is None


def test_time():
    assert run(check_time, "7:05") is None
    assert run(check_time, "07:05:09") is None
    assert run(check_time, "7") == "Invalid 24h time format: 7"
    assert run(check_time, "7:05:09:01") == "Invalid 24h time format: 7:05:09:01"


@pytest.mark.parametrize("value", ["2024-02-29", "March 3, 2021", "03/04/2020", date(2020, 1, 1)])
def test_date_accepts_parseable_values(value):
    assert run(check_date, value) is None


@pytest.mark.parametrize("value", ["not a date", "2021-13-45", ""])
def test_date_rejects_unparseable_values(value):
    assert run(check_date, value) == "Invalid date format"


def test_datetime_requires_datetime_instance():
    assert run(check_datetime, datetime(2024, 1, 1, 12, 0)) is None
    assert run(check_datetime, "2024-01-01 12:00") == "Invalid date/time format"


@pytest.mark.parametrize("value", ["(555) 123-4567", "555.123.4567", 5551234567])
def test_phone_accepts_ten_digits(value):
    assert run(check_phone, value) is None


@pytest.mark.parametrize("value", ["555-1234", "+1 (555) 123-4567", "phone"])
def test_phone_rejects_other_lengths(value):
    assert run(check_phone, value) == "A 10-digit phone number is required"
