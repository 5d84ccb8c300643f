"""Identifier transforms for generated declarations.

All functions here are pure. ``NamingPolicy`` bundles the switches that
affect naming and is passed explicitly to every caller.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List


class RuntimeEnumsStyle(str, Enum):
    PASCAL_CASE = "pascal-case"
    SCREAMING_SNAKE_CASE = "screaming-snake-case"


class IdentifierRole(str, Enum):
    """What an identifier names in the output."""
    MEMBER = "member"
    TYPE = "type"
    TABLE_KEY = "table_key"
    ENUM_MEMBER = "enum_member"


@dataclass(frozen=True)
class NamingPolicy:
    camel_case: bool = False
    singular: bool = False
    type_only_imports: bool = True
    runtime_enums: bool = False
    runtime_enums_style: RuntimeEnumsStyle = RuntimeEnumsStyle.PASCAL_CASE


# Anything that is not a letter or digit separates words.
_SEPARATOR_PATTERN = re.compile(r"[\W_]+")

# Trailing run of letters, in any script.
_TRAILING_LETTERS = re.compile(r"[^\W\d_]+$")

_IRREGULAR_SINGULARS = {
    "people": "person",
    "men": "man",
    "women": "woman",
    "children": "child",
    "mice": "mouse",
    "geese": "goose",
    "teeth": "tooth",
    "feet": "foot",
    "oxen": "ox",
    "criteria": "criterion",
    "indices": "index",
    "matrices": "matrix",
    "vertices": "vertex",
    "analyses": "analysis",
    "movies": "movie",
    "cookies": "cookie",
}

_UNCOUNTABLE = frozenset({
    "data", "metadata", "information", "equipment", "news", "series",
    "species", "sheep", "fish", "deer", "media", "feedback", "staff",
})

_KEEP_ENDINGS = ("ss", "us", "is")


def split_words(identifier: str) -> List[str]:
    """Split an identifier on separators and case boundaries.

    >>> split_words("user_id")
    ['user', 'id']
    >>> split_words("createdAt")
    ['created', 'At']
    """
    words: List[str] = []
    for chunk in _SEPARATOR_PATTERN.split(identifier):
        words.extend(_split_chunk(chunk))
    return words


def _is_lower(char: str) -> bool:
    # Caseless letters (and ß) count as lowercase.
    return not char.isupper() and not char.isdigit()


def _split_chunk(chunk: str) -> List[str]:
    # Lower/upper boundaries, acronym boundaries ("HTTPServer") and digits
    # following letters are kept together ("id2").
    words = []
    i, n = 0, len(chunk)
    while i < n:
        start = i
        if chunk[i].isdigit():
            while i < n and chunk[i].isdigit():
                i += 1
            words.append(chunk[start:i])
            continue
        if chunk[i].isupper():
            while i < n and chunk[i].isupper():
                i += 1
            if i < n and _is_lower(chunk[i]) and i - start > 1:
                # The last capital starts the next word.
                i -= 1
                words.append(chunk[start:i])
                continue
        while i < n and _is_lower(chunk[i]):
            i += 1
        while i < n and chunk[i].isdigit():
            i += 1
        words.append(chunk[start:i])
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_camel_case(identifier: str) -> str:
    words = split_words(identifier)
    if not words:
        return identifier
    return words[0].lower() + "".join(_capitalize(w) for w in words[1:])


def to_pascal_case(identifier: str) -> str:
    return "".join(_capitalize(w) for w in split_words(identifier))


def to_screaming_snake_case(identifier: str) -> str:
    return "_".join(w.upper() for w in split_words(identifier))


def _match_case(source: str, replacement: str) -> str:
    if source.isupper():
        return replacement.upper()
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _singularize_word(word: str) -> str:
    lower = word.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower])

    if len(lower) > 4 and lower.endswith("ies"):
        stem = word[:-3]
        return stem + ("Y" if word.isupper() else "y")
    if lower.endswith("sses"):
        return word[:-2]
    if lower.endswith(("ches", "shes", "xes", "zzes")):
        return word[:-2]
    if lower.endswith("uses"):
        return word[:-2]
    if lower.endswith(_KEEP_ENDINGS):
        return word
    if len(lower) > 1 and lower.endswith("s"):
        return word[:-1]
    return word


def singularize(name: str) -> str:
    """Singularize the last word of a table name.

    Only the trailing word changes (``user_accounts`` becomes
    ``user_account``); names that are already singular, uncountable or
    ambiguous pass through unchanged.
    """
    match = _TRAILING_LETTERS.search(name)
    if not match:
        return name
    # Only look at the last case-delimited word, e.g. "UserAccounts".
    tail = match.group(0)
    words = split_words(tail)
    last = words[-1] if words else tail
    head = name[: len(name) - len(last)]
    return head + _singularize_word(last)


def _safe_type_name(name: str) -> str:
    if not name:
        return "_"
    if name[0].isdigit():
        return "_" + name
    return name


def transform(identifier: str, policy: NamingPolicy, role: IdentifierRole = IdentifierRole.MEMBER) -> str:
    """Transform a raw catalog identifier for the given output role.

    Args:
        identifier: Raw identifier (column, table or enum label)
        policy: Naming switches
        role: What the identifier names in the output

    Returns:
        The declaration-ready identifier (not yet quoted)
    """
    if role == IdentifierRole.TYPE:
        name = singularize(identifier) if policy.singular else identifier
        return _safe_type_name(to_pascal_case(name))

    if role == IdentifierRole.ENUM_MEMBER:
        if policy.runtime_enums_style == RuntimeEnumsStyle.SCREAMING_SNAKE_CASE:
            name = to_screaming_snake_case(identifier)
        else:
            name = to_pascal_case(identifier)
        return _safe_type_name(name)

    if role == IdentifierRole.TABLE_KEY:
        if not policy.camel_case:
            return identifier
        return ".".join(to_camel_case(part) for part in identifier.split("."))

    return to_camel_case(identifier) if policy.camel_case else identifier


def is_identifier(name: str) -> bool:
    """True for names usable unquoted as a TypeScript property (`$` allowed)."""
    return name.replace("$", "_").isidentifier()


def quote_member(name: str) -> str:
    """Quote a property name unless it is a plain identifier."""
    if is_identifier(name):
        return name
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'
