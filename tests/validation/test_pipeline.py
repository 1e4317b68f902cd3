import logging

import pytest

from rowguard.core import IntegerField, Model, StringField, TextField
from rowguard.validation import (
    INVALID_COLUMN_MESSAGE,
    REQUIRED_MESSAGE,
    STAGES,
    ValidationError,
    ValidationRule,
    pipeline,
)


def reject_john(record, value, column):
    if "john" in value.lower():
        return "John is not allowed"
    return None


class Contact(Model):
    name = StringField(max_length=10, validation={"required": True})
    email = StringField(
        max_length=100,
        validation={"types": ["email"], "check": reject_john},
    )
    age = IntegerField(validation={"required": True, "types": ["int"]})
    start = StringField(max_length=8, validation={"types": ["time"]})
    notes = TextField()


def test_column_without_rule_always_passes():
    contact = Contact()
    assert contact.validate("notes") is None
    assert contact.validate("notes", "") is None
    assert contact.validate("notes", None) is None
    assert contact.validate("id", "not a number") is None


def test_required_rejects_missing_and_empty_values():
    contact = Contact()
    assert contact.validate("name") == REQUIRED_MESSAGE
    assert contact.validate("name", "") == REQUIRED_MESSAGE
    assert contact.validate("name", None) == REQUIRED_MESSAGE
    assert contact.validate("name", "Ada") is None


def test_required_wins_over_typed_checks():
    contact = Contact()
    assert contact.validate("age", "") == "Field is required"
    assert contact.validate("age", "x1") == "Not a valid number"


def test_email_scenarios():
    contact = Contact()
    assert contact.validate("email", "happy@sad.net") is None
    assert contact.validate("email", "not-an-email") == "Invalid E-Mail address"


def test_custom_check_runs_after_type_checks():
    contact = Contact()
    assert contact.validate("email", "john@x.com") == "John is not allowed"
    # The type failure short-circuits before the custom check sees the value.
    assert contact.validate("email", "john") == "Invalid E-Mail address"


@pytest.mark.parametrize("value", ["12:45", "19:05:00", "12:3", "11:30:25", "25:00"])
def test_time_shape_is_checked_not_hour_range(value):
    assert Contact().validate("start", value) is None


def test_time_rejects_other_shapes():
    assert Contact().validate("start", "noon") == "Invalid 24h time format: noon"


def test_size_limit_boundary():
    contact = Contact()
    assert contact.validate("name", "a" * 10) is None
    assert contact.validate("name", "a" * 11) == "Can not exceed 10 characters"


def test_size_check_runs_last():
    class Tag(Model):
        label = StringField(max_length=3, validation={"types": ["int"]})

    assert Tag().validate("label", "abcd") == "Not a valid number"
    assert Tag().validate("label", "1234") == "Can not exceed 3 characters"


def test_size_check_skipped_for_unbounded_text():
    class Article(Model):
        body = TextField(validation={"types": ["text"]})

    assert Article().validate("body", "x" * 10_000) is None


def test_size_check_can_be_disabled():
    class Code(Model):
        value = StringField(max_length=2, validation={"types": ["text"], "size_check": False})

    assert Code().validate("value", "abcdef") is None


def test_optional_absent_value_skips_every_check(monkeypatch):
    calls = []

    def failing_checker(record, value, column):
        calls.append(value)
        return "should not run"

    def custom(record, value, column):
        calls.append(value)
        return "should not run"

    monkeypatch.setattr(pipeline, "get_checker", lambda name: failing_checker)

    class Survey(Model):
        answer = StringField(validation=ValidationRule(types=("int",), check=custom))

    assert Survey().validate("answer") is None
    assert Survey().validate("answer", None) is None
    assert calls == []
    assert Survey().validate("answer", "") == "should not run"


def test_first_failing_type_short_circuits(monkeypatch):
    calls = []

    def make(name, message):
        def checker(record, value, column):
            calls.append(name)
            return message

        return checker

    registry = {"int": make("int", "A failed"), "text": make("text", "B failed")}
    monkeypatch.setattr(pipeline, "get_checker", lambda name: registry[name.value])

    class Pair(Model):
        value = StringField(validation={"types": ["int", "text"]})

    assert Pair().validate("value", "x") == "A failed"
    assert calls == ["int"]


def test_stage_order_puts_required_before_absent_short_circuit():
    assert STAGES[0] is pipeline.required_stage
    assert STAGES[1] is pipeline.absent_stage
    assert STAGES[-1] is pipeline.size_stage


def test_unknown_type_is_warned_and_skipped(caplog):
    caplog.set_level(logging.WARNING, logger="rowguard.validation")

    class Odd(Model):
        value = StringField(validation={"types": ["colour", "int"]})

    assert Odd().validate("value", "12") is None
    assert Odd().validate("value", "red") == "Not a valid number"
    messages = [record.getMessage() for record in caplog.records]
    assert any("Unknown validation type (colour)" in message for message in messages)


def test_unknown_column_warns_and_passes(caplog):
    caplog.set_level(logging.WARNING, logger="rowguard.core.model")
    assert Contact().validate("missing", "value") is None
    assert any("bad column name: missing" in record.getMessage() for record in caplog.records)


def test_validate_object_collects_failures():
    contact = Contact(name="Ada Lovelace Byron", email="ada@engine.org", age="x")
    errors = contact.validate()
    assert errors == {"name": "Can not exceed 10 characters", "age": "Not a valid number"}


def test_validate_object_returns_none_when_clean():
    contact = Contact(name="Ada", age=36)
    assert contact.validate() is None
    assert contact.validate_object() is None


def test_validate_values_reports_invalid_column_names():
    contact = Contact(name="Ada", age=36)
    errors = contact.validate({"nickname": "Countess", "name": "Ada"})
    assert errors == {"nickname": INVALID_COLUMN_MESSAGE}


def test_validate_values_checks_supplied_values_without_storing():
    contact = Contact(name="Ada", age=36)
    errors = contact.validate({"name": "", "age": "36"})
    assert errors == {"name": REQUIRED_MESSAGE}
    assert contact.name == "Ada"
    assert contact.validate_values({"name": "Grace", "age": "7"}) is None
    assert contact.name == "Ada"
    assert contact.age == 36


def test_explicit_value_is_not_stored():
    contact = Contact(name="Ada")
    contact.validate("name", "Grace")
    assert contact.name == "Ada"


def test_dispatcher_rejects_extra_arguments():
    with pytest.raises(TypeError):
        Contact().validate("name", "Ada", "extra")


def test_get_validation_rule():
    rule = Contact().get_validation_rule("age")
    assert rule.required is True
    assert [t.value for t in rule.types] == ["int"]
    assert Contact().get_validation_rule("notes") is None


def test_full_clean_raises_aggregate():
    contact = Contact(name="", age="old")
    with pytest.raises(ValidationError) as excinfo:
        contact.full_clean()
    assert excinfo.value.errors == {"name": REQUIRED_MESSAGE, "age": "Not a valid number"}
    assert "name: Field is required" in str(excinfo.value)


def test_full_clean_merges_clean_hook_errors():
    class Account(Model):
        email = StringField(validation={"required": True, "types": ["email"]})
        confirm_email = StringField()

        def clean(self):
            if self.email != self.confirm_email:
                raise ValidationError({"confirm_email": "Emails must match."})

    account = Account(email="a@company.org", confirm_email="b@company.org")
    with pytest.raises(ValidationError) as excinfo:
        account.full_clean()
    assert excinfo.value.errors == {"confirm_email": "Emails must match."}
