import pytest
from omegaconf import OmegaConf

from fcamap.context import FormalContext
from fcamap.data_structures import EntityType, Mapping
from fcamap.errors import MatcherNotConfiguredError
from fcamap.lexical_matcher import LexicalMatcher
from fcamap.matching import (
    SOURCE,
    TARGET,
    ClassMatcher,
    InstanceMatcher,
    MatcherSetting,
    PropertyMatcher,
    add_one_to_one,
    capabilities,
    one_to_one_concepts,
    split_extent,
)
from fcamap.property_matcher import AdditionalPropertyMatcher
from fcamap.refine import ClassRefiner


class TestCapabilities:
    def test_lexical_matcher_has_all(self):
        matcher = LexicalMatcher()
        assert isinstance(matcher, ClassMatcher)
        assert isinstance(matcher, PropertyMatcher)
        assert isinstance(matcher, InstanceMatcher)
        assert capabilities(matcher) == {"classes", "properties", "instances"}

    def test_additional_property_matcher_matches_properties_only(self):
        assert capabilities(AdditionalPropertyMatcher()) == {"properties"}

    def test_refiner_is_not_a_matcher(self):
        assert capabilities(ClassRefiner()) == frozenset()


class TestMatcherSetting:
    def test_defaults(self):
        setting = MatcherSetting()
        assert setting.extract_source_type is False
        assert setting.extract_target_type is False
        assert setting.strict_lattice is False
        assert setting.name == "MatcherSetting"

    def test_reads_config(self):
        cfg = OmegaConf.create(
            {"matcher": {"extract_type": {"source": True, "target": False}}, "lattice": {"strict": True}}
        )
        setting = MatcherSetting(cfg)
        assert setting.extract_source_type is True
        assert setting.extract_target_type is False
        assert setting.strict_lattice is True

        setting.set_extract_type(False, True)
        assert (setting.extract_source_type, setting.extract_target_type) == (False, True)

    def test_unconfigured_matcher_fails_loudly(self):
        with pytest.raises(MatcherNotConfiguredError):
            LexicalMatcher().map_ont_classes(Mapping())

    def test_close_before_matching_is_safe(self):
        matcher = LexicalMatcher()
        matcher.close()
        matcher.close()

    def test_close_releases_models(self, source_model, target_model):
        with LexicalMatcher() as matcher:
            matcher.set_source_target(source_model, target_model)
        assert matcher.source is None
        assert source_model.closed and target_model.closed

    def test_type_extraction_applied_once(self, source_model, target_model):
        cfg = OmegaConf.create({"matcher": {"extract_type": {"source": True, "target": True}}})
        matcher = LexicalMatcher(cfg)
        matcher.set_source_target(source_model, target_model)
        matcher.map_ont_classes(Mapping())
        assert "http://example.org/source#Workshop" in source_model.classes()


class TestOneToOne:
    def test_split_extent(self):
        sources, targets = split_extent({(SOURCE, "b"), (SOURCE, "a"), (TARGET, "c")})
        assert sources == ["a", "b"]
        assert targets == ["c"]

    def test_most_general_pairs(self):
        incidence = {
            (SOURCE, "s1"): {"x"},
            (TARGET, "t1"): {"x"},
            (SOURCE, "s2"): {"y"},
            (TARGET, "t2"): {"y", "z"},
            (TARGET, "t3"): {"z"},
        }
        lattice = FormalContext(incidence).lattice()
        pairs = {(s, t) for s, t, _ in one_to_one_concepts(lattice)}
        assert pairs == {("s1", "t1"), ("s2", "t2")}

    def test_empty_intent_is_no_evidence(self):
        incidence = {(SOURCE, "s"): {"a"}, (TARGET, "t"): {"b"}}
        lattice = FormalContext(incidence).lattice()
        assert list(one_to_one_concepts(lattice)) == []

    def test_add_one_to_one_measure(self):
        incidence = {(SOURCE, "s"): frozenset({"a", "b"}), (TARGET, "t"): frozenset({"a", "c"})}
        lattice = FormalContext(incidence).lattice()
        mapping = Mapping()

        assert add_one_to_one(lattice, incidence, mapping, EntityType.CLASS) == 1
        (c,) = list(mapping)
        assert (c.source, c.target, c.entity_type) == ("s", "t", EntityType.CLASS)
        assert c.measure == pytest.approx(1 / 3)
