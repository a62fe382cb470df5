"""Naming conventions used to derive source names, keys and class names.

Only the regular English rules are covered, plus a small table of
irregular words. Applications with unusual names should set the source
name and relationship options explicitly.
"""

import re

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "status": "statuses",
}
_IRREGULAR_PLURALS = {plural: singular for singular, plural in _IRREGULAR.items()}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def underscore(word: str) -> str:
    """Convert ``CamelCase`` or ``camelCase`` to ``snake_case``."""
    return _CAMEL_BOUNDARY.sub("_", word).replace("-", "_").lower()


def camelize(word: str) -> str:
    """Convert ``snake_case`` to ``CamelCase``."""
    if "_" not in word:
        return word[:1].upper() + word[1:]
    return "".join(part.capitalize() for part in word.split("_") if part)


def _split_last(word: str) -> tuple[str, str]:
    # Inflect only the last word of a compound name.
    match = re.search(r"([A-Z]?[a-z0-9]+|[A-Z]+)$", word)
    if not match:
        return "", word
    return word[: match.start()], match.group(0)


def _match_case(template: str, word: str) -> str:
    return word[:1].upper() + word[1:] if template[:1].isupper() else word


def pluralize(word: str) -> str:
    """Return the plural form of ``word``."""
    head, last = _split_last(word)
    lower = last.lower()
    if lower in _IRREGULAR:
        return head + _match_case(last, _IRREGULAR[lower])
    if lower in _IRREGULAR_PLURALS:
        return word
    if re.search(r"[^aeiou]y$", lower):
        return head + last[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return head + last + "es"
    return head + last + "s"


def singularize(word: str) -> str:
    """Return the singular form of ``word``."""
    head, last = _split_last(word)
    lower = last.lower()
    if lower in _IRREGULAR_PLURALS:
        return head + _match_case(last, _IRREGULAR_PLURALS[lower])
    if lower in _IRREGULAR:
        return word
    if lower.endswith("ies") and len(lower) > 3:
        return head + last[:-3] + "y"
    if re.search(r"(s|x|z|ch|sh)es$", lower):
        return head + last[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return head + last[:-1]
    return word


def tableize(class_name: str) -> str:
    """``Company`` -> ``companies``, ``OrderItem`` -> ``order_items``."""
    return underscore(pluralize(class_name))


def foreign_key(class_name: str, key: str = "id") -> str:
    """``Company`` -> ``company_id``."""
    return f"{underscore(class_name)}_{key}"


__all__ = [
    "camelize",
    "foreign_key",
    "pluralize",
    "singularize",
    "tableize",
    "underscore",
]
