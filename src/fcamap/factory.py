"""
DESCRIPTION:

    Factories selecting a concrete matcher or refiner by name.
"""

from typing import Dict, Optional, Type

from omegaconf import DictConfig

from fcamap.lexical_matcher import LexicalMatcher
from fcamap.matching import MatcherSetting
from fcamap.property_matcher import AdditionalPropertyMatcher
from fcamap.refine import ClassRefiner, InstanceRefiner, RefinerSetting

MATCHERS: Dict[str, Type[MatcherSetting]] = {
    "lexical": LexicalMatcher,
    "additional_property": AdditionalPropertyMatcher,
}

REFINERS: Dict[str, Type[RefinerSetting]] = {
    "class": ClassRefiner,
    "instance": InstanceRefiner,
}


def create_matcher(name: str, cfg: Optional[DictConfig] = None) -> MatcherSetting:
    """
    Creates a matcher.

    Args:
        name: One of MATCHERS ("lexical", "additional_property").
        cfg: Optional configuration passed to the matcher.

    Raises:
        ValueError: For an unknown matcher name.
    """
    if name not in MATCHERS:
        raise ValueError(f"Unknown matcher '{name}'. Available: {sorted(MATCHERS)}")
    return MATCHERS[name](cfg)


def create_refiner(name: str, cfg: Optional[DictConfig] = None) -> RefinerSetting:
    """
    Creates a refiner.

    Args:
        name: One of REFINERS ("class", "instance").
        cfg: Optional configuration passed to the refiner.

    Raises:
        ValueError: For an unknown refiner name.
    """
    if name not in REFINERS:
        raise ValueError(f"Unknown refiner '{name}'. Available: {sorted(REFINERS)}")
    return REFINERS[name](cfg)
