"""
DESCRIPTION:

    Lexical FCA Matcher.

    Matches entities of two ontologies through the lattice of a "name" formal
    context:
        - objects:    source and target entities of one kind
        - attributes: their normalised names (labels and local name)

    Two entities that share names end up together in the extent of a concept.
    Every most general concept whose extent holds exactly one source and one
    target entity gives a correspondence.

    Implements the class, property and instance matching capabilities.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from loguru import logger
from omegaconf import DictConfig

from fcamap.context import FormalContext
from fcamap.data_structures import EntityType, Mapping
from fcamap.lattice import ConceptLattice
from fcamap.lexicon import normalized_names
from fcamap.matching import SOURCE, TARGET, MatcherSetting, Tagged, add_one_to_one
from fcamap.parse import OntologyModel


class LexicalMatcher(MatcherSetting):
    """Finds correspondences between entities with equal normalised names."""

    def __init__(self, cfg: Optional[DictConfig] = None):
        super().__init__(cfg)
        # Last lattice built per entity kind (for inspection and export)
        self.lattices: Dict[EntityType, ConceptLattice] = {}

    def _names(self, model: OntologyModel, uris: Iterable[str]) -> Dict[str, FrozenSet[str]]:
        return {uri: frozenset(normalized_names(model.labels(uri))) for uri in uris}

    def match_resources(
        self,
        sources: Iterable[str],
        targets: Iterable[str],
        mapping: Mapping,
        entity_type: EntityType = EntityType.UNKNOWN,
    ) -> int:
        """
        Matches arbitrary source and target entities.

        Args:
            sources: Source entity URIs.
            targets: Target entity URIs.
            mapping: Mapping to add correspondences to.
            entity_type: Category recorded on the new correspondences.

        Returns:
            int: Number of new correspondences.
        """
        source, target = self._models()

        incidence: Dict[Tagged, FrozenSet[str]] = {}
        for uri, names in self._names(source, sources).items():
            if names:
                incidence[(SOURCE, uri)] = names
        for uri, names in self._names(target, targets).items():
            if names:
                incidence[(TARGET, uri)] = names

        if not incidence:
            return 0

        lattice = FormalContext(incidence).lattice(strict=self.strict_lattice)
        self.lattices[entity_type] = lattice
        return add_one_to_one(lattice, incidence, mapping, entity_type)

    def _map(self, entity_type: EntityType, mapping: Mapping) -> None:
        source, target = self._models()
        added = self.match_resources(source.entities(entity_type), target.entities(entity_type), mapping, entity_type)
        logger.info(f"{self.name}: {added} new {entity_type.value} correspondences")

    # ------------------------------ CAPABILITIES ------------------------------ #

    def map_ont_classes(self, mapping: Mapping) -> None:
        self._map(EntityType.CLASS, mapping)

    def map_ont_properties(self, mapping: Mapping) -> None:
        """Datatype, object and plain RDF properties, each kind matched separately."""
        self.map_datatype_properties(mapping)
        self.map_object_properties(mapping)
        self._map(EntityType.PROPERTY, mapping)

    def map_datatype_properties(self, mapping: Mapping) -> None:
        self._map(EntityType.DATATYPE_PROPERTY, mapping)

    def map_object_properties(self, mapping: Mapping) -> None:
        self._map(EntityType.OBJECT_PROPERTY, mapping)

    def map_instances(self, mapping: Mapping) -> None:
        self._map(EntityType.INSTANCE, mapping)
