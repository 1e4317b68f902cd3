"""
Data models for the rowguard signup example.
"""

from __future__ import annotations

from rowguard.core import BooleanField, CharField, DateField, Model, StringField, TextField


def reject_john(record, value, column):
    if "john" in str(value).lower():
        return "John is not allowed"
    return None


class Member(Model):
    handle = StringField(
        max_length=20,
        nullable=False,
        validation={"required": True, "types": ["shortname", "unique"]},
    )
    email = StringField(
        max_length=100,
        validation={"required": True, "types": ["email", "unique"], "check": reject_john},
    )
    phone = CharField(length=14, validation={"types": ["phone"]})
    joined_on = DateField(validation={"types": ["date"]})
    newsletter = BooleanField(default=False, validation={"types": ["bool"]})
    bio = TextField(validation={"types": ["text"]})
