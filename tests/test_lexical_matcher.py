import pytest
from omegaconf import OmegaConf

from fcamap.data_structures import Correspondence, EntityType, Mapping
from fcamap.lexical_matcher import LexicalMatcher
from fcamap.parse import OntologyModel
from fcamap.validator import LatticeValidator

SRC = "http://example.org/source#"
TGT = "http://example.org/target#"
TINY_SRC = "http://example.org/tiny-source#"
TINY_TGT = "http://example.org/tiny-target#"


class TestTinyOntologies:
    @pytest.fixture
    def matcher(self, data_dir):
        matcher = LexicalMatcher()
        matcher.set_source_target(
            OntologyModel(data_dir / "tiny_source.ttl"),
            OntologyModel(data_dir / "tiny_target.ttl"),
        )
        yield matcher
        matcher.close()

    def test_single_class_correspondence(self, matcher):
        """One near-exact label match and nothing else."""
        mapping = Mapping()
        matcher.map_ont_classes(mapping)
        matcher.map_ont_properties(mapping)
        matcher.map_instances(mapping)

        expected = Mapping([Correspondence(TINY_SRC + "ConferencePaper", TINY_TGT + "Conference_Paper", EntityType.CLASS)])
        assert mapping == expected
        assert next(iter(mapping)).measure == pytest.approx(1.0)

    def test_lattices_are_kept(self, matcher):
        mapping = Mapping()
        matcher.map_ont_classes(mapping)
        lattice = matcher.lattices[EntityType.CLASS]
        assert LatticeValidator().validate(lattice)["valid"]


class TestConferenceOntologies:
    @pytest.fixture
    def matcher(self, source_model, target_model):
        cfg = OmegaConf.create({"matcher": {"extract_type": {"source": True, "target": True}}})
        matcher = LexicalMatcher(cfg)
        matcher.set_source_target(source_model, target_model)
        return matcher

    def test_classes(self, matcher):
        mapping = Mapping()
        matcher.map_ont_classes(mapping)
        assert mapping.pairs(EntityType.CLASS) == {
            (SRC + "Paper", TGT + "Paper"),
            (SRC + "Author", TGT + "Author"),
            (SRC + "Reviewer", TGT + "Referee"),
        }

    def test_properties_by_kind(self, matcher):
        mapping = Mapping()
        matcher.map_object_properties(mapping)
        assert len(mapping) == 0

        matcher.map_datatype_properties(mapping)
        assert mapping.pairs(EntityType.DATATYPE_PROPERTY) == {(SRC + "title", TGT + "title")}

    def test_instances(self, matcher):
        mapping = Mapping()
        matcher.map_instances(mapping)
        assert mapping.pairs(EntityType.INSTANCE) == {
            (SRC + "paper1", TGT + "p1"),
            (SRC + "alice", TGT + "a_smith"),
        }

    def test_call_order_does_not_matter(self, matcher):
        first = Mapping()
        matcher.map_ont_classes(first)
        matcher.map_ont_properties(first)

        second = Mapping()
        matcher.map_ont_properties(second)
        matcher.map_ont_classes(second)

        assert first == second

    def test_repeated_matching_is_idempotent(self, matcher):
        mapping = Mapping()
        matcher.map_ont_classes(mapping)
        size = len(mapping)
        matcher.map_ont_classes(mapping)
        assert len(mapping) == size

    def test_match_resources(self, matcher):
        mapping = Mapping()
        added = matcher.match_resources([SRC + "Paper", SRC + "Author"], [TGT + "Paper"], mapping, EntityType.CLASS)
        assert added == 1
        assert mapping.pairs() == {(SRC + "Paper", TGT + "Paper")}

    def test_match_nothing(self, matcher):
        assert matcher.match_resources([], [], Mapping()) == 0
