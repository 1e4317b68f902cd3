"""
Password strength checking.

Passwords are stored hashed, so this is not a column checker. Each call gets
its own :class:`PasswordPolicy`; nothing is configured globally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from ..utils import get_logger

logger = get_logger("validation.password")

DEFAULT_DICTIONARIES: Tuple[str, ...] = (
    "/usr/share/dict/web2",
    "/usr/share/dict/words",
    "/usr/dict/words",
    "/usr/share/dict/linux.words",
)

_ALPHABET_SEQUENCES = ("abcdefghijklmnopqrstuvwxyz", "0123456789")
_KEYBOARD_SEQUENCES = ("qwertyuiop", "asdfghjkl", "zxcvbnm", "1234567890")


@dataclass(frozen=True)
class PasswordPolicy:
    """
    Thresholds for :func:`check_password_strength`.

    ``following`` rejects runs of that many sequential characters (``abcd``,
    ``4321``, ``qwer``). ``groups`` is the longest allowed run of one repeated
    character. A threshold of ``0`` disables its check.
    """

    following: int = 4
    following_keyboard: bool = True
    groups: int = 3
    min_length: int = 8
    max_length: int = 64
    dictionary: bool = True
    dictionary_min_length: int = 5
    dictionary_paths: Tuple[str, ...] = DEFAULT_DICTIONARIES
    extra_words: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_params(cls, params: Optional[Mapping[str, Any]] = None) -> "PasswordPolicy":
        """
        Build a policy from upper-case parameter names.

        Recognised keys are ``FOLLOWING``, ``GROUPS``, ``MINLEN``, ``MAXLEN``
        and ``DICTIONARY``. Missing or ``None`` values keep the default.
        """
        policy = cls()
        if not params:
            return policy
        overrides: dict[str, Any] = {}
        for key, attr in (
            ("FOLLOWING", "following"),
            ("GROUPS", "groups"),
            ("MINLEN", "min_length"),
            ("MAXLEN", "max_length"),
        ):
            if params.get(key) is not None:
                overrides[attr] = int(params[key])
        if "DICTIONARY" in params:
            overrides["dictionary"] = bool(params["DICTIONARY"])
        return replace(policy, **overrides)


@lru_cache(maxsize=8)
def _load_dictionary(paths: Tuple[str, ...], min_length: int) -> FrozenSet[str]:
    words: set[str] = set()
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            continue
        with path.open(encoding="utf-8", errors="ignore") as handle:
            for line in handle:
                word = line.strip().lower()
                if len(word) >= min_length and word.isalpha():
                    words.add(word)
    if not words:
        logger.debug("No dictionary words loaded from %s", ", ".join(paths))
    return frozenset(words)


def _dictionary_word(password: str, words: Iterable[str], min_length: int) -> Optional[str]:
    lowered = password.lower()
    vocabulary = words if isinstance(words, (set, frozenset)) else set(words)
    for start in range(len(lowered)):
        for end in range(len(lowered), start + min_length - 1, -1):
            chunk = lowered[start:end]
            if chunk in vocabulary:
                return chunk
    return None


def _has_sequence(password: str, length: int, sequences: Iterable[str]) -> bool:
    lowered = password.lower()
    candidates = [seq for base in sequences for seq in (base, base[::-1])]
    for start in range(len(lowered) - length + 1):
        chunk = lowered[start : start + length]
        if any(chunk in seq for seq in candidates):
            return True
    return False


def check_password_strength(
    password: str,
    policy: Union[PasswordPolicy, Mapping[str, Any], None] = None,
) -> Optional[str]:
    """
    Return a message describing why ``password`` is weak, or ``None``.

    ``policy`` may also be a mapping of upper-case parameters, see
    :meth:`PasswordPolicy.from_params`.
    """
    if not isinstance(policy, PasswordPolicy):
        policy = PasswordPolicy.from_params(policy)

    if (policy.min_length and len(password) < policy.min_length) or (
        policy.max_length and len(password) > policy.max_length
    ):
        return f"Not between {policy.min_length} and {policy.max_length} characters"

    if policy.dictionary:
        words = _load_dictionary(policy.dictionary_paths, policy.dictionary_min_length)
        if policy.extra_words:
            words = words | {word.lower() for word in policy.extra_words}
        found = _dictionary_word(password, words, policy.dictionary_min_length)
        if found:
            return f"contains the dictionary word '{found}'"

    if policy.following:
        sequences = _ALPHABET_SEQUENCES
        if policy.following_keyboard:
            sequences = sequences + _KEYBOARD_SEQUENCES
        if _has_sequence(password, policy.following, sequences):
            return f"contains {policy.following} or more sequential characters"

    if policy.groups and re.search(r"(.)\1{%d}" % policy.groups, password):
        return f"contains more than {policy.groups} repeated characters"

    return None
