import logging

import pytest

from rowguard.core import (
    BooleanField,
    CharField,
    DateTimeField,
    IntegerField,
    Model,
    ModelConfigurationError,
    StringField,
    TextField,
)
from rowguard.validation import ValidationRule


class User(Model):
    name = StringField(max_length=50, nullable=False)
    age = IntegerField(default=0)
    is_active = BooleanField(default=True)


def test_model_metadata_collects_fields_in_order():
    assert list(User._meta.fields.keys()) == ["id", "name", "age", "is_active"]
    assert User._meta.primary_key.name == "id"
    assert User._meta.table_name == "user"


def test_table_name_from_camel_case_and_meta():
    class BlogEntry(Model):
        title = StringField()

    class Renamed(Model):
        title = StringField()

        class Meta:
            table = "entries"

    assert BlogEntry._meta.table_name == "blog_entry"
    assert Renamed._meta.table_name == "entries"


def test_model_initializes_defaults():
    user = User(name="Alice")
    assert user.name == "Alice"
    assert user.age == 0
    assert user.is_active is True
    assert user.pk is None
    assert user.in_storage is False
    assert user.session is None


def test_unknown_keyword_is_rejected():
    with pytest.raises(TypeError):
        User(name="Alice", nickname="Al")


def test_setting_field_enforces_choices():
    class Article(Model):
        status = StringField(choices=("draft", "published"), default="draft")

    article = Article()
    with pytest.raises(ValueError):
        article.status = "archived"


def test_non_nullable_field_rejects_none():
    class Profile(Model):
        email = StringField(nullable=False)

    profile = Profile(email="user@company.org")
    assert profile.email == "user@company.org"

    with pytest.raises(ValueError):
        profile.email = None


def test_over_long_string_without_rule_is_rejected_on_assignment():
    with pytest.raises(ValueError):
        User(name="x" * 80)


def test_over_long_string_with_rule_is_left_to_validation():
    class Member(Model):
        handle = StringField(max_length=5, validation={"required": True})
        motto = StringField(max_length=5, validation={"size_check": False})

    member = Member(handle="x" * 8)
    assert member.handle == "x" * 8
    assert member.validate("handle") == "Can not exceed 5 characters"
    with pytest.raises(ValueError):
        member.motto = "y" * 8


def test_custom_primary_key_prevents_auto_field():
    class Token(Model):
        token_id = StringField(primary_key=True)

    assert list(Token._meta.fields.keys()) == ["token_id"]
    assert Token._meta.primary_key.name == "token_id"
    assert Token.primary_columns() == ["token_id"]


def test_model_pk_property_returns_primary_key_value():
    class Post(Model):
        identifier = IntegerField(primary_key=True)
        title = StringField()

    post = Post(identifier=12, title="Hello")
    assert post.pk == 12


def test_auto_now_add_datetime_field():
    class Audit(Model):
        created_at = DateTimeField(auto_now_add=True, nullable=False)

    audit = Audit()
    assert audit.created_at is not None
    assert hasattr(audit.created_at, "isoformat")


def test_duplicate_primary_key_raises_error():
    with pytest.raises(ModelConfigurationError):

        class BadModel(Model):
            code = IntegerField(primary_key=True)
            other = IntegerField(primary_key=True)


def test_manual_id_field_without_primary_key_errors():
    with pytest.raises(ModelConfigurationError):

        class BadIdentifier(Model):
            id = IntegerField()


def test_column_metadata_helpers(caplog):
    assert list(User.columns()) == ["id", "name", "age", "is_active"]
    assert User.primary_columns() == ["id"]
    assert User.has_field("age")
    assert not User.has_field("nickname")
    assert User.column_info("name") is User._meta.fields["name"]

    caplog.set_level(logging.WARNING, logger="rowguard.core.model")
    assert User.column_info("nickname") is None
    assert "bad column name: nickname" in caplog.text


def test_field_column_descriptor():
    class Listing(Model):
        title = StringField(max_length=40)
        code = CharField(length=6)
        body = TextField()

    title = Listing.column_info("title")
    assert title.data_type == "varchar"
    assert title.size == 40
    assert title.is_bounded_text
    assert title.column_type_sql() == "VARCHAR(40)"
    assert Listing.column_info("code").column_type_sql() == "CHAR(6)"
    assert not Listing.column_info("body").is_bounded_text
    assert Listing.column_info("body").validation is None


def test_validation_option_is_coerced_to_rule():
    class Entry(Model):
        slug = StringField(validation={"is_required": True, "type": "shortname"})

    rule = Entry.column_info("slug").validation
    assert isinstance(rule, ValidationRule)
    assert rule.required
    assert [name.value for name in rule.types] == ["shortname"]


def test_dirty_tracking_and_to_dict():
    user = User(name="Alice", age=3)
    assert not user.is_dirty()
    user.age = 4
    assert user.is_dirty()
    assert user.to_dict() == {"id": None, "name": "Alice", "age": 4, "is_active": True}


def test_query_without_session_cannot_execute():
    with pytest.raises(RuntimeError):
        User(name="Alice").query().count()
