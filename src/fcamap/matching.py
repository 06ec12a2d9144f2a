"""
DESCRIPTION:

    Matching contracts.

    A matcher is configured with a source and a target ontology and then adds
    correspondences to a shared Mapping in place. What it can match is given by
    the capabilities it implements:

        ClassMatcher     map_ont_classes(mapping)
        PropertyMatcher  map_ont_properties / map_datatype_properties / map_object_properties
        InstanceMatcher  map_instances(mapping)

    Capabilities are structural (runtime-checkable protocols), so a concrete
    matcher provides any subset of them without a fixed class hierarchy.
    The order in which the map_* methods are called does not matter.
"""

from collections import deque
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Protocol, Set, Tuple, runtime_checkable

from loguru import logger
from omegaconf import DictConfig, OmegaConf

from fcamap.data_structures import Concept, EntityType, Mapping
from fcamap.errors import MatcherNotConfiguredError
from fcamap.lattice import ConceptLattice
from fcamap.parse import OntologyModel

# Tags distinguishing source from target entities inside one formal context
SOURCE = "source"
TARGET = "target"

Tagged = Tuple[str, str]  # (SOURCE | TARGET, uri)

# ---------------------------------------------------------------------------- #
#                                 CAPABILITIES                                 #
# ---------------------------------------------------------------------------- #


@runtime_checkable
class ClassMatcher(Protocol):
    def map_ont_classes(self, mapping: Mapping) -> None: ...


@runtime_checkable
class PropertyMatcher(Protocol):
    def map_ont_properties(self, mapping: Mapping) -> None: ...

    def map_datatype_properties(self, mapping: Mapping) -> None: ...

    def map_object_properties(self, mapping: Mapping) -> None: ...


@runtime_checkable
class InstanceMatcher(Protocol):
    def map_instances(self, mapping: Mapping) -> None: ...


def capabilities(matcher: object) -> FrozenSet[str]:
    """Names of the matching capabilities a matcher provides."""
    provided = {
        "classes": isinstance(matcher, ClassMatcher),
        "properties": isinstance(matcher, PropertyMatcher),
        "instances": isinstance(matcher, InstanceMatcher),
    }
    return frozenset(name for name, ok in provided.items() if ok)


# ---------------------------------------------------------------------------- #
#                                    SETTING                                   #
# ---------------------------------------------------------------------------- #


class MatcherSetting:
    """
    Configuration and lifecycle shared by all matchers.

    The source and target ontologies must be set before any map_* call;
    `close()` releases them and may be called at any time, even twice.
    """

    def __init__(self, cfg: Optional[DictConfig] = None):
        """
        Args:
            cfg: Optional configuration; reads `matcher.extract_type.{source,target}`
                 and `lattice.strict`.
        """
        cfg = cfg if cfg is not None else OmegaConf.create({})

        self.source: Optional[OntologyModel] = None
        self.target: Optional[OntologyModel] = None

        self.extract_source_type: bool = bool(OmegaConf.select(cfg, "matcher.extract_type.source", default=False))
        self.extract_target_type: bool = bool(OmegaConf.select(cfg, "matcher.extract_type.target", default=False))
        self.strict_lattice: bool = bool(OmegaConf.select(cfg, "lattice.strict", default=False))

        self._types_extracted = False
        self.name = self.__class__.__name__

    def set_source_target(self, source: OntologyModel, target: OntologyModel) -> None:
        self.source = source
        self.target = target
        self._types_extracted = False

    def set_extract_type(self, source: bool, target: bool) -> None:
        """Whether classes only known through rdf:type of individuals are matched too."""
        self.extract_source_type = source
        self.extract_target_type = target
        self._types_extracted = False

    def _models(self) -> Tuple[OntologyModel, OntologyModel]:
        """
        Returns the configured (source, target), applying type extraction once.

        Raises:
            MatcherNotConfiguredError: If set_source_target() has not been called.
        """
        if self.source is None or self.target is None:
            raise MatcherNotConfiguredError(f"{self.name}: call set_source_target() before matching")

        if not self._types_extracted:
            if self.extract_source_type:
                self.source.extract_types()
            if self.extract_target_type:
                self.target.extract_types()
            self._types_extracted = True

        return self.source, self.target

    def close(self) -> None:
        """Releases the source and target ontologies."""
        for model in (self.source, self.target):
            if model is not None:
                model.close()
        self.source = None
        self.target = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ---------------------------------------------------------------------------- #
#                            LATTICE -> CORRESPONDENCES                        #
# ---------------------------------------------------------------------------- #


def split_extent(extent: Iterable[Tagged]) -> Tuple[List[str], List[str]]:
    """Source and target URIs of an extent, each sorted."""
    sources = sorted(uri for side, uri in extent if side == SOURCE)
    targets = sorted(uri for side, uri in extent if side == TARGET)
    return sources, targets


def one_to_one_concepts(lattice: ConceptLattice) -> Iterator[Tuple[str, str, Concept]]:
    """
    Yields (source_uri, target_uri, concept) for the most general concepts
    whose extent holds exactly one source and one target entity and whose
    intent is not empty.

    Walks the lattice breadth-first from its roots. Below a one-to-one concept
    every extent is smaller, so the search does not descend further there.
    """
    queue = deque(sorted(lattice.roots()))
    seen: Set[int] = set(queue)

    while queue:
        idx = queue.popleft()
        concept = lattice.concept_of(idx)
        sources, targets = split_extent(concept.extent)

        if not sources or not targets:
            # Nothing below can pair a source with a target
            continue

        if len(sources) == 1 and len(targets) == 1 and concept.intent:
            yield sources[0], targets[0], concept
            continue

        for child in sorted(lattice.children(idx)):
            if child not in seen:
                seen.add(child)
                queue.append(child)


def add_one_to_one(
    lattice: ConceptLattice,
    incidence: Dict[Tagged, FrozenSet],
    mapping: Mapping,
    entity_type: EntityType,
) -> int:
    """
    Adds a correspondence for every one-to-one concept of the lattice.

    The measure is the Jaccard overlap of the two entities' attribute sets.

    Returns:
        int: Number of new correspondences.
    """
    added = 0
    for source_uri, target_uri, concept in one_to_one_concepts(lattice):
        union = incidence[(SOURCE, source_uri)] | incidence[(TARGET, target_uri)]
        measure = len(concept.intent) / len(union) if union else 0.0
        added += mapping.add(source_uri, target_uri, entity_type, measure=measure)

    logger.debug(f"Added {added} {entity_type.value} correspondences from {len(lattice)} concepts")
    return added
