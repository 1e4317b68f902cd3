"""
Signup example: validate form input before storing members.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from rowguard.adapters import ConnectionConfig, SQLiteAdapter
from rowguard.persistence import Session
from rowguard.validation import PasswordPolicy

from .models import Member

SIGNUPS: List[Dict[str, Any]] = [
    {"handle": "octavia", "email": "octavia@kindred.org", "phone": "(555) 010-2030"},
    {"handle": "haruki", "email": "haruki@wind.jp", "joined_on": "1979-06-01"},
    {"handle": "octavia", "email": "someone@else.org"},
    {"handle": "johnny", "email": "JOHN@x.com"},
    {"handle": "bad handle!", "email": "not-an-email"},
]


def bootstrap_session(url: str = "sqlite:///:memory:") -> Session:
    session = Session(SQLiteAdapter(), connection_config=ConnectionConfig.from_url(url))
    session.create_table(Member)
    return session


def register(
    session: Session,
    form: Mapping[str, Any],
    password: Optional[str] = None,
) -> Optional[Dict[str, str]]:
    """
    Store a member built from ``form``. Returns the per-column errors instead
    when the form does not validate.
    """
    member = session.new(Member)
    errors = member.validate(dict(form)) or {}
    if password is not None:
        weak = member.check_password_strength(password, PasswordPolicy(dictionary=False))
        if weak:
            errors["password"] = weak
    if errors:
        return errors

    for column, value in form.items():
        setattr(member, column, value)
    with session.transaction():
        session.add(member)
    return None


def run_demo(url: str = "sqlite:///:memory:") -> Dict[str, Any]:
    session = bootstrap_session(url)
    try:
        rejected: Dict[str, Dict[str, str]] = {}
        for form in SIGNUPS:
            errors = register(session, form)
            if errors:
                rejected[form["handle"]] = errors
        members = [member.handle for member in session.query(Member).order_by("handle")]
        return {"members": members, "rejected": rejected}
    finally:
        session.close()
