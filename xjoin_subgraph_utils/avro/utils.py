# Copyright 2022-present Kensho Technologies, LLC.
"""Naming conventions used when deriving GraphQL names from Avro field names."""
import re

from graphql.pyutils import snake_to_camel
import inflect


_INFLECT_ENGINE = inflect.engine()

# The trailing word of a snake_case or PascalCase name, e.g. "Schema" in "TestSchema".
_LAST_WORD_PATTERN = re.compile(r"[A-Z]?[a-z0-9]*$")

# Singular nouns ending in "s", e.g. address, bus, analysis.
_SINGULAR_S_ENDINGS = ("ss", "us", "is")


def _is_plural(word: str) -> bool:
    """Return True if the word is the plural form of some other word, e.g. hosts."""
    if word.lower().endswith(_SINGULAR_S_ENDINGS):
        return False
    singular = _INFLECT_ENGINE.singular_noun(word)
    return bool(singular) and _INFLECT_ENGINE.plural_noun(singular) == word


def capitalize(word: str) -> str:
    """Return the word with its first letter upper-cased and the rest left untouched."""
    return word[:1].upper() + word[1:]


def pluralize(word: str) -> str:
    """Return the plural form of the name, pluralizing only its last word.

    Names that already end in a plural word are returned unchanged. Upper-case names stay
    upper-case, and the casing of the rest of the name is preserved.
    """
    if not word:
        return word

    if word.isupper():
        return pluralize(word.lower()).upper()

    last_word = _LAST_WORD_PATTERN.search(word).group(0)
    if not last_word:
        return word

    if _is_plural(last_word):
        return word

    return word[: -len(last_word)] + _INFLECT_ENGINE.plural_noun(last_word)


def type_name(name: str) -> str:
    """Return the GraphQL object type name for the given field name."""
    return snake_to_camel(name)


def input_name(name: str) -> str:
    """Return the GraphQL filter input name for the given field name."""
    return type_name(name) + "Filter"


def query_name(name: str) -> str:
    """Return the GraphQL root query (and collection type) name for the given field name."""
    return pluralize(type_name(name))


def enumeration_name(name: str) -> str:
    """Return the enumeration name for the given name, e.g. HostEnumeration for Host."""
    return name + "Enumeration"


def order_by_scalar_name(name: str) -> str:
    """Return the name of the scalar holding order-by field paths, e.g. HostsOrderBy."""
    return query_name(name) + "OrderBy"


def order_by_enum_name(name: str) -> str:
    """Return the name of the enum listing a reference's sortable fields, e.g. HOSTS_ORDER_BY."""
    return pluralize(name).upper() + "_ORDER_BY"
