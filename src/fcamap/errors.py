"""
DESCRIPTION:

    Exceptions raised by the matching pipeline.

    The lattice engine itself is lenient and never raises unless it was
    built in strict mode. Everything else fails loudly.
"""

from typing import Optional


class FcaMapError(Exception):
    """Base class for all fcamap errors."""


class MatcherNotConfiguredError(FcaMapError, RuntimeError):
    """A matcher or refiner was used before its source/target ontologies were set."""


class LatticeError(FcaMapError, ValueError):
    """Raised by a strict lattice when its top or bottom concept is missing."""


class OntologyLoadError(FcaMapError, OSError):
    """An ontology file could not be read or parsed."""

    def __init__(self, path: Optional[str], message: str):
        super().__init__(f"{message} (ontology: {path})")
        self.path = path


class AlignmentFormatError(FcaMapError, ValueError):
    """An alignment file could not be read or does not follow the Alignment format."""

    def __init__(self, path: Optional[str], message: str):
        super().__init__(f"{message} (alignment: {path})")
        self.path = path
