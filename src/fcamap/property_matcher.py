"""
DESCRIPTION:

    Additional Property Matcher.

    Finds property correspondences that exact names miss, using the class
    correspondences already present in the mapping. The formal context has
    source and target properties as objects, and as attributes
        - ("token", t)       for every name token t of the property
        - ("domain", k)      if the property's domain is aligned by class correspondence k
        - ("range", k)       likewise for its range

    A one-to-one concept whose intent holds at least one token and at least
    one domain/range attribute gives a correspondence.
    Without class correspondences in the mapping nothing is added.
"""

from typing import Dict, FrozenSet, List, Set, Tuple

from loguru import logger

from fcamap.context import FormalContext
from fcamap.data_structures import EntityType, Mapping
from fcamap.lexicon import tokens
from fcamap.matching import SOURCE, TARGET, MatcherSetting, Tagged, one_to_one_concepts
from fcamap.parse import OntologyModel


class AdditionalPropertyMatcher(MatcherSetting):
    """Property matcher driven by aligned domains and ranges."""

    def _features(
        self,
        model: OntologyModel,
        uri: str,
        side_index: int,
        class_anchors: List[Tuple[str, str]],
    ) -> FrozenSet[Tuple[str, object]]:
        features: Set[Tuple[str, object]] = set()
        for label in model.labels(uri):
            features.update(("token", t) for t in tokens(label))

        domains, ranges = model.domains(uri), model.ranges(uri)
        for k, anchor in enumerate(class_anchors):
            if anchor[side_index] in domains:
                features.add(("domain", k))
            if anchor[side_index] in ranges:
                features.add(("range", k))
        return frozenset(features)

    def _map(self, entity_type: EntityType, mapping: Mapping) -> None:
        source, target = self._models()

        class_anchors = sorted(mapping.pairs(EntityType.CLASS))
        if not class_anchors:
            logger.info(f"{self.name}: no class correspondences to build on, skipping {entity_type.value}")
            return

        incidence: Dict[Tagged, FrozenSet[Tuple[str, object]]] = {}
        for uri in source.entities(entity_type):
            incidence[(SOURCE, uri)] = self._features(source, uri, 0, class_anchors)
        for uri in target.entities(entity_type):
            incidence[(TARGET, uri)] = self._features(target, uri, 1, class_anchors)

        if not incidence:
            return

        lattice = FormalContext(incidence).lattice(strict=self.strict_lattice)

        added = 0
        for source_uri, target_uri, concept in one_to_one_concepts(lattice):
            kinds = {kind for kind, _ in concept.intent}
            if "token" not in kinds or not kinds & {"domain", "range"}:
                continue
            union = incidence[(SOURCE, source_uri)] | incidence[(TARGET, target_uri)]
            added += mapping.add(source_uri, target_uri, entity_type, measure=len(concept.intent) / len(union))

        logger.info(f"{self.name}: {added} new {entity_type.value} correspondences")

    def map_ont_properties(self, mapping: Mapping) -> None:
        self.map_datatype_properties(mapping)
        self.map_object_properties(mapping)

    def map_datatype_properties(self, mapping: Mapping) -> None:
        self._map(EntityType.DATATYPE_PROPERTY, mapping)

    def map_object_properties(self, mapping: Mapping) -> None:
        self._map(EntityType.OBJECT_PROPERTY, mapping)
