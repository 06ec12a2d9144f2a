"""
DESCRIPTION:

    Formal Context.

    A binary relation between objects and attributes, and the enumeration of
    its formal concepts. Matchers build one context per matching task and hand
    the resulting concepts to the ConceptLattice.
"""

from collections import defaultdict
from typing import Dict, FrozenSet, Generic, Iterable, Mapping, Set

from loguru import logger

from fcamap.data_structures import A, Concept, O
from fcamap.lattice import ConceptLattice


class FormalContext(Generic[O, A]):
    """
    A formal context (G, M, I).

    Args:
        incidence: Each object mapped to the attributes it has.
    """

    def __init__(self, incidence: Mapping[O, Iterable[A]]):
        self.incidence: Dict[O, FrozenSet[A]] = {g: frozenset(attrs) for g, attrs in incidence.items()}

        self.objects: FrozenSet[O] = frozenset(self.incidence)
        self.attributes: FrozenSet[A] = frozenset(a for attrs in self.incidence.values() for a in attrs)

        # Inverted index: attribute -> objects having it
        self._objects_by_attribute: Dict[A, Set[O]] = defaultdict(set)
        for g, attrs in self.incidence.items():
            for a in attrs:
                self._objects_by_attribute[a].add(g)

    def extent_of(self, attributes: Iterable[A]) -> FrozenSet[O]:
        """Derivation A': the objects having all given attributes."""
        extent = set(self.objects)
        for a in attributes:
            extent &= self._objects_by_attribute.get(a, set())
            if not extent:
                break
        return frozenset(extent)

    def intent_of(self, objects: Iterable[O]) -> FrozenSet[A]:
        """Derivation B': the attributes shared by all given objects."""
        intent = set(self.attributes)
        for g in objects:
            intent &= self.incidence[g]
            if not intent:
                break
        return frozenset(intent)

    def concepts(self) -> Set[Concept[O, A]]:
        """
        Enumerates all formal concepts.

        Every concept intent is an intersection of object intents (the empty
        intersection being the full attribute set), so the intents are closed
        under intersection starting from {M}.
        """
        intents: Set[FrozenSet[A]] = {self.attributes}
        for attrs in self.incidence.values():
            intents |= {attrs & intent for intent in intents}

        concepts = {Concept(self.extent_of(intent), intent) for intent in intents}
        logger.debug(
            f"Formal context with {len(self.objects)} objects and {len(self.attributes)} attributes "
            f"has {len(concepts)} concepts"
        )
        return concepts

    def lattice(self, strict: bool = False) -> ConceptLattice[O, A]:
        """Builds the concept lattice of this context (top-down and bottom-up)."""
        lattice = ConceptLattice(self.concepts(), strict=strict)
        lattice.build_bottom_up()
        return lattice

    def __len__(self) -> int:
        return len(self.objects)
