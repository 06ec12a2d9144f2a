"""
DESCRIPTION:

    Lexical normalisation of ontology names.

    Labels and local names are reduced to a canonical lowercase, space
    separated form so that e.g. "ConferencePaper", "conference_paper" and
    "Conference paper" become the same attribute in a formal context.
"""

import re
from typing import Iterable, Set

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def local_name(uri: str) -> str:
    """
    Extracts the local part of a URI.

    Examples:
        "http://example.org/conf#hasAuthor" -> "hasAuthor"
        "http://example.org/conf/Paper" -> "Paper"
    """
    uri = str(uri)
    if "#" in uri:
        return uri.rsplit("#", 1)[-1]
    return uri.rstrip("/").rsplit("/", 1)[-1]


def normalize(text: str) -> str:
    """Splits camel case, lowercases, and collapses everything that is not a letter or digit into single spaces."""
    text = _CAMEL_BOUNDARY.sub(" ", str(text))
    return " ".join(_NON_ALNUM.sub(" ", text.lower()).split())


def tokens(text: str) -> Set[str]:
    return set(normalize(text).split())


def normalized_names(names: Iterable[str]) -> Set[str]:
    """Normalised, non-empty forms of the given names."""
    return {n for n in (normalize(name) for name in names) if n}
