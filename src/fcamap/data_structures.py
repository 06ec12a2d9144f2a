"""
DESCRIPTION:

    Data structures for
        - Formal Concept Analysis (formal concepts)
        - Ontology alignment (correspondences and mappings)

    Ontology elements are referenced by URI strings only, so nothing here
    depends on a particular ontology model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Generic, Iterable, Iterator, Optional, Set, Tuple, TypeVar

O = TypeVar("O")  # object type (extent elements)
A = TypeVar("A")  # attribute type (intent elements)

# ---------------------------------------------------------------------------- #
#                                      FCA                                     #
# ---------------------------------------------------------------------------- #


def _format_elements(elements: FrozenSet[Any]) -> str:
    return "{" + ", ".join(sorted(str(e) for e in elements)) + "}"


@dataclass(frozen=True)
class Concept(Generic[O, A]):
    """
    A formal concept: a pair of an extent (objects) and an intent (attributes).

    Both halves are stored as frozensets, so a concept is immutable, hashable
    and compares structurally. Callers may pass any iterable; it is copied.
    """

    extent: FrozenSet[O] = field(default_factory=frozenset)
    intent: FrozenSet[A] = field(default_factory=frozenset)

    def __post_init__(self):
        # Copy into frozensets (no aliasing of caller-owned containers)
        object.__setattr__(self, "extent", frozenset(self.extent))
        object.__setattr__(self, "intent", frozenset(self.intent))

    def is_subconcept_of(self, other: "Concept[O, A]") -> bool:
        """True if this concept lies below (or equals) `other` in the concept order."""
        return self.extent <= other.extent and self.intent >= other.intent

    def __str__(self) -> str:
        return f"({_format_elements(self.extent)}, {_format_elements(self.intent)})"


# ---------------------------------------------------------------------------- #
#                                   ALIGNMENT                                  #
# ---------------------------------------------------------------------------- #


class EntityType(Enum):
    """Semantic category of a correspondence."""

    CLASS = "class"
    DATATYPE_PROPERTY = "datatype_property"
    OBJECT_PROPERTY = "object_property"
    PROPERTY = "property"  # rdf:Property without a more specific OWL type
    INSTANCE = "instance"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Correspondence:
    """
    An asserted relation between a source and a target ontology element.

    Identity is (source, target, entity_type). The relation and the confidence
    measure are carried along but do not take part in equality.
    """

    source: str
    target: str
    entity_type: EntityType = EntityType.UNKNOWN
    relation: str = field(default="=", compare=False)
    measure: float = field(default=1.0, compare=False)

    def __repr__(self) -> str:
        return f"<{self.source}, {self.relation}, {self.target}> [{self.entity_type.value}, {self.measure:.2f}]"


class Mapping:
    """
    A set of correspondences between two ontologies.

    Adding is idempotent per (source, target, entity_type), and two mappings
    are equal when they hold the same correspondences, whatever the insertion
    order. A mapping is not synchronised: share it across threads only with
    an external lock, or hand over a `copy()`.
    """

    def __init__(self, correspondences: Optional[Iterable[Correspondence]] = None):
        self._correspondences: Dict[Correspondence, Correspondence] = {}
        if correspondences is not None:
            for c in correspondences:
                self.add_correspondence(c)

    def add(
        self,
        source: str,
        target: str,
        entity_type: EntityType = EntityType.UNKNOWN,
        relation: str = "=",
        measure: float = 1.0,
    ) -> bool:
        """
        Adds a correspondence.

        Returns:
            bool: True if the correspondence was new, False if it was already present.
        """
        return self.add_correspondence(Correspondence(str(source), str(target), entity_type, relation, measure))

    def add_correspondence(self, correspondence: Correspondence) -> bool:
        if correspondence in self._correspondences:
            return False
        self._correspondences[correspondence] = correspondence
        return True

    def update(self, other: "Mapping") -> int:
        """Adds all correspondences of `other`; returns how many were new."""
        return sum(self.add_correspondence(c) for c in other)

    def get_correspondences(self, entity_type: Optional[EntityType] = None) -> Set[Correspondence]:
        if entity_type is None:
            return set(self._correspondences)
        return {c for c in self._correspondences if c.entity_type == entity_type}

    def pairs(self, entity_type: Optional[EntityType] = None) -> Set[Tuple[str, str]]:
        """(source, target) URI pairs, optionally restricted to one category."""
        return {(c.source, c.target) for c in self.get_correspondences(entity_type)}

    def contains_pair(self, source: str, target: str, entity_type: Optional[EntityType] = None) -> bool:
        return (str(source), str(target)) in self.pairs(entity_type)

    def difference(self, other: "Mapping") -> "Mapping":
        """Correspondences of this mapping that are missing from `other`."""
        return Mapping(c for c in self if c not in other)

    def copy(self) -> "Mapping":
        return Mapping(self)

    def evaluate(self, reference: "Mapping", by_pair: bool = False) -> Dict[str, float]:
        """
        Compares this mapping against a reference alignment.

        Args:
            reference: The expected correspondences.
            by_pair: Compare (source, target) pairs only, ignoring categories
                     (reference alignments do not always resolve them).

        Returns:
            Dict with precision, recall and f1 (0.0 when undefined).
        """
        found = self.pairs() if by_pair else set(self._correspondences)
        expected = reference.pairs() if by_pair else set(reference._correspondences)
        correct = len(found & expected)
        precision = correct / len(found) if found else 0.0
        recall = correct / len(expected) if expected else 0.0
        f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
        return {"precision": precision, "recall": recall, "f1": f1}

    def __contains__(self, correspondence: object) -> bool:
        return correspondence in self._correspondences

    def __iter__(self) -> Iterator[Correspondence]:
        return iter(list(self._correspondences))

    def __len__(self) -> int:
        return len(self._correspondences)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._correspondences.keys() == other._correspondences.keys()

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"Mapping({len(self)} correspondences)"

    def print(self) -> None:
        """Prints a summary of the mapping."""
        print("Mapping Summary:")
        for entity_type in EntityType:
            n = len(self.get_correspondences(entity_type))
            if n:
                print(f"  Nb of {entity_type.value} correspondences: {n}")
        for c in sorted(self, key=lambda c: (c.entity_type.value, c.source, c.target)):
            print(f"    {c}")
