"""
DESCRIPTION:

    Alignment pipeline.

    Loads two ontologies, runs the configured matcher (and optionally the
    additional property matcher and the class refiner), writes the resulting
    alignment, and evaluates it against a reference alignment if one is given.
"""

import os
import sys
from pathlib import Path
from typing import Optional

import hydra
from loguru import logger
from omegaconf import DictConfig, OmegaConf

from fcamap.alignment import read_alignment, write_alignment
from fcamap.data_structures import EntityType, Mapping
from fcamap.factory import create_matcher, create_refiner
from fcamap.matching import ClassMatcher, InstanceMatcher, PropertyMatcher, capabilities
from fcamap.parse import OntologyModel
from fcamap.validator import LatticeValidator


def run_alignment(cfg: DictConfig) -> Mapping:
    """
    Runs the full alignment pipeline described by `cfg`.

    Returns:
        Mapping: The final alignment.
    """
    source = OntologyModel(cfg.ontology.source, format=cfg.ontology.get("format"))
    target = OntologyModel(cfg.ontology.target, format=cfg.ontology.get("format"))

    try:
        mapping = _align(source, target, cfg)
    finally:
        source.close()
        target.close()

    logger.success(f"Alignment complete: {len(mapping)} correspondences")
    return mapping


def _align(source: OntologyModel, target: OntologyModel, cfg: DictConfig) -> Mapping:
    mapping = Mapping()

    # --------------------------------- MATCHING --------------------------------- #

    matcher = create_matcher(cfg.matcher.name, cfg)
    matcher.set_source_target(source, target)
    logger.info(f"Matching with {matcher.name} (capabilities: {sorted(capabilities(matcher))})")

    if cfg.matcher.map.classes and isinstance(matcher, ClassMatcher):
        matcher.map_ont_classes(mapping)
    if cfg.matcher.map.properties and isinstance(matcher, PropertyMatcher):
        matcher.map_ont_properties(mapping)
    if cfg.matcher.map.instances and isinstance(matcher, InstanceMatcher):
        matcher.map_instances(mapping)

    if cfg.matcher.get("additional_properties", False) and cfg.matcher.name != "additional_property":
        additional = create_matcher("additional_property", cfg)
        additional.set_source_target(source, target)
        additional.map_ont_properties(mapping)

    _inspect_lattices(matcher, cfg)

    # -------------------------------- REFINEMENT -------------------------------- #

    if cfg.refine.enabled:
        mapping = _refine_classes(matcher, mapping, source, target, cfg)

    # --------------------------------- OUTPUT ----------------------------------- #

    if cfg.alignment.output:
        write_alignment(mapping, cfg.alignment.output, onto1=str(cfg.ontology.source), onto2=str(cfg.ontology.target))

    if cfg.alignment.get("reference"):
        reference = read_alignment(cfg.alignment.reference, source=source, target=target)
        scores = mapping.evaluate(reference, by_pair=True)
        logger.info(
            f"Evaluation against {cfg.alignment.reference}: "
            f"P={scores['precision']:.3f} R={scores['recall']:.3f} F1={scores['f1']:.3f}"
        )

    return mapping


def _refine_classes(matcher, mapping: Mapping, source: OntologyModel, target: OntologyModel, cfg: DictConfig) -> Mapping:
    """
    Replaces the class correspondences of `mapping` by those supported by
    instance correspondences.

    Instance anchors are matched on the side when instance matching is off;
    they only reach the output if `matcher.map.instances` is set.
    """
    anchors = Mapping(mapping.get_correspondences(EntityType.INSTANCE))
    if not anchors and isinstance(matcher, InstanceMatcher):
        matcher.map_instances(anchors)

    if not anchors:
        logger.warning("No instance correspondences to refine with, keeping class correspondences as matched")
        return mapping

    refiner = create_refiner("class", cfg)
    refiner.set_source_target(source, target)
    refiner.add_instance_anchors(anchors)

    candidates = Mapping(mapping.get_correspondences(EntityType.CLASS))
    enhanced = refiner.validate_class_anchors(candidates)

    refined = Mapping(c for c in mapping if c.entity_type != EntityType.CLASS)
    refined.update(enhanced)
    return refined


def _inspect_lattices(matcher, cfg: DictConfig) -> None:
    lattices = getattr(matcher, "lattices", {})

    if cfg.lattice.get("validate", False):
        validator = LatticeValidator()
        for entity_type, lattice in lattices.items():
            result = validator.validate(lattice)
            if result["valid"]:
                logger.debug(f"{entity_type.value} lattice valid: {result['stats']}")
            else:
                for error in result["errors"]:
                    logger.warning(f"{entity_type.value} lattice: {error}")

    export_dir: Optional[str] = cfg.lattice.get("export_dot")
    if export_dir:
        Path(export_dir).mkdir(parents=True, exist_ok=True)
        for entity_type, lattice in lattices.items():
            path = Path(export_dir) / f"{entity_type.value}_lattice.dot"
            path.write_text(lattice.to_dot(), encoding="utf-8")
            logger.info(f"Exported {entity_type.value} lattice to {path}")


# ============================================================================ #
#                              MAIN ENTRY POINT                                #
# ============================================================================ #


REPO_ROOT = os.environ.get("FCAMAP_ROOT", "../..")


@hydra.main(version_base=None, config_path=f"{REPO_ROOT}/configs/matcher", config_name="config")
def main(cfg: DictConfig):
    """Main entry point for ontology alignment."""

    logger.remove()
    logger.add(sys.stderr, level=cfg.logging.level)

    logger.info(f"Running FCA ontology matcher with configuration:\n{OmegaConf.to_yaml(cfg)}")

    mapping = run_alignment(cfg)
    mapping.print()


if __name__ == "__main__":
    main()
