"""
DESCRIPTION:

    Refiners.

    A second pass over the alignment: trusted correspondences of one kind
    (anchors) are used as evidence to validate, and extend, candidate
    correspondences of another kind.

        ClassRefiner     instance anchors  -> validated/enhanced class mapping
        InstanceRefiner  class anchors     -> validated instance mapping

    Anchor and candidate mappings are only read; results go to a separate
    `enhanced` mapping.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple

from loguru import logger
from omegaconf import DictConfig

from fcamap.context import FormalContext
from fcamap.data_structures import EntityType, Mapping
from fcamap.matching import SOURCE, TARGET, MatcherSetting, Tagged, one_to_one_concepts


class RefinerSetting(MatcherSetting):
    """Configuration and lifecycle shared by all refiners (same as for matchers)."""


class ClassRefiner(RefinerSetting):
    """
    Validates class correspondences with instance anchors.

    Every class gets the indices of the anchors whose instance on its side is
    typed with it. A candidate class correspondence is kept when both classes
    share an anchor. In addition, each lattice concept that singles out exactly
    one source and one target class by their shared anchors adds that pair.
    """

    def __init__(self, cfg: Optional[DictConfig] = None):
        super().__init__(cfg)
        self.instance_anchors: List[Tuple[str, str]] = []

    def add_instance_anchors(self, instance_anchors: Mapping) -> None:
        """Records trusted instance correspondences (the mapping itself is not kept or modified)."""
        known = set(self.instance_anchors)
        for pair in sorted(instance_anchors.pairs()):
            if pair not in known:
                self.instance_anchors.append(pair)
                known.add(pair)

    def _anchor_context(self) -> Dict[Tagged, FrozenSet[int]]:
        source, target = self._models()

        incidence: Dict[Tagged, set] = {}
        for k, (source_instance, target_instance) in enumerate(self.instance_anchors):
            for cls in source.types(source_instance):
                incidence.setdefault((SOURCE, cls), set()).add(k)
            for cls in target.types(target_instance):
                incidence.setdefault((TARGET, cls), set()).add(k)

        return {obj: frozenset(anchors) for obj, anchors in incidence.items()}

    def validate_class_anchors(self, class_anchors: Mapping, enhanced: Optional[Mapping] = None) -> Mapping:
        """
        Args:
            class_anchors: Candidate class correspondences (not modified).
            enhanced: Mapping receiving the result; a new one if omitted.

        Returns:
            Mapping: `enhanced`, holding the supported candidates and the pairs
                     singled out by the instance anchors.
        """
        enhanced = enhanced if enhanced is not None else Mapping()
        incidence = self._anchor_context()

        kept = 0
        for c in class_anchors:
            source_anchors = incidence.get((SOURCE, c.source), frozenset())
            target_anchors = incidence.get((TARGET, c.target), frozenset())
            if source_anchors & target_anchors:
                kept += enhanced.add(c.source, c.target, EntityType.CLASS, c.relation, c.measure)
            else:
                logger.debug(f"Rejected class correspondence without instance support: {c}")

        added = 0
        if incidence:
            lattice = FormalContext(incidence).lattice(strict=self.strict_lattice)
            for source_cls, target_cls, concept in one_to_one_concepts(lattice):
                union = incidence[(SOURCE, source_cls)] | incidence[(TARGET, target_cls)]
                added += enhanced.add(source_cls, target_cls, EntityType.CLASS, measure=len(concept.intent) / len(union))

        logger.info(
            f"{self.name}: kept {kept}/{len(class_anchors)} class correspondences, "
            f"added {added} from {len(self.instance_anchors)} instance anchors"
        )
        return enhanced


class InstanceRefiner(RefinerSetting):
    """
    Validates instance correspondences with class anchors.

    An instance correspondence is kept when some class anchor relates a type
    of the source instance to a type of the target instance.
    """

    def __init__(self, cfg: Optional[DictConfig] = None):
        super().__init__(cfg)
        self.class_anchors: List[Tuple[str, str]] = []

    def add_class_anchors(self, class_anchors: Mapping) -> None:
        known = set(self.class_anchors)
        for pair in sorted(class_anchors.pairs()):
            if pair not in known:
                self.class_anchors.append(pair)
                known.add(pair)

    def validate_instance_anchors(self, instance_anchors: Mapping, enhanced: Optional[Mapping] = None) -> Mapping:
        """
        Args:
            instance_anchors: Candidate instance correspondences (not modified).
            enhanced: Mapping receiving the result; a new one if omitted.

        Returns:
            Mapping: `enhanced`, holding the supported candidates.
        """
        source, target = self._models()
        enhanced = enhanced if enhanced is not None else Mapping()
        anchors = set(self.class_anchors)

        kept = 0
        for c in instance_anchors:
            type_pairs = {(s, t) for s in source.types(c.source) for t in target.types(c.target)}
            if type_pairs & anchors:
                kept += enhanced.add(c.source, c.target, EntityType.INSTANCE, c.relation, c.measure)
            else:
                logger.debug(f"Rejected instance correspondence without class support: {c}")

        logger.info(f"{self.name}: kept {kept}/{len(instance_anchors)} instance correspondences")
        return enhanced
