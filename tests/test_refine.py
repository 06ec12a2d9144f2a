import pytest

from fcamap.data_structures import Correspondence, EntityType, Mapping
from fcamap.errors import MatcherNotConfiguredError
from fcamap.refine import ClassRefiner, InstanceRefiner

SRC = "http://example.org/source#"
TGT = "http://example.org/target#"


def instances(*pairs):
    return Mapping(Correspondence(SRC + s, TGT + t, EntityType.INSTANCE) for s, t in pairs)


def classes(*pairs):
    return Mapping(Correspondence(SRC + s, TGT + t, EntityType.CLASS) for s, t in pairs)


class TestClassRefiner:
    @pytest.fixture
    def refiner(self, source_model, target_model):
        refiner = ClassRefiner()
        refiner.set_source_target(source_model, target_model)
        return refiner

    def test_unsupported_correspondence_is_dropped(self, refiner):
        """An unsupported candidate goes, the anchor-supported pair comes in."""
        anchors = instances(("alice", "a_smith"))
        candidates = classes(("Reviewer", "Referee"))

        refiner.add_instance_anchors(anchors)
        enhanced = refiner.validate_class_anchors(candidates)

        assert not enhanced.contains_pair(SRC + "Reviewer", TGT + "Referee")
        assert enhanced == classes(("Author", "Author"))

    def test_supported_correspondence_is_kept(self, refiner):
        refiner.add_instance_anchors(instances(("paper1", "p1"), ("alice", "a_smith")))
        enhanced = refiner.validate_class_anchors(classes(("Paper", "Paper"), ("Reviewer", "Referee")))
        assert enhanced == classes(("Paper", "Paper"), ("Author", "Author"))

    def test_inputs_are_read_only(self, refiner):
        anchors = instances(("paper1", "p1"))
        candidates = classes(("Paper", "Paper"), ("Reviewer", "Referee"))
        anchors_before, candidates_before = anchors.copy(), candidates.copy()

        refiner.add_instance_anchors(anchors)
        refiner.validate_class_anchors(candidates)

        assert anchors == anchors_before
        assert candidates == candidates_before

    def test_enhanced_mapping_is_extended(self, refiner):
        enhanced = classes(("Reviewer", "Referee"))
        refiner.add_instance_anchors(instances(("paper1", "p1")))

        result = refiner.validate_class_anchors(classes(("Paper", "Paper")), enhanced)
        assert result is enhanced
        assert enhanced == classes(("Reviewer", "Referee"), ("Paper", "Paper"))

    def test_anchors_are_deduplicated(self, refiner):
        refiner.add_instance_anchors(instances(("paper1", "p1")))
        refiner.add_instance_anchors(instances(("paper1", "p1"), ("alice", "a_smith")))
        assert refiner.instance_anchors == [(SRC + "alice", TGT + "a_smith"), (SRC + "paper1", TGT + "p1")]

    def test_no_anchors(self, refiner):
        assert len(refiner.validate_class_anchors(classes(("Paper", "Paper")))) == 0

    def test_unconfigured(self):
        refiner = ClassRefiner()
        refiner.add_instance_anchors(instances(("paper1", "p1")))
        with pytest.raises(MatcherNotConfiguredError):
            refiner.validate_class_anchors(classes(("Paper", "Paper")))


class TestInstanceRefiner:
    def test_validate_instance_anchors(self, source_model, target_model):
        refiner = InstanceRefiner()
        refiner.set_source_target(source_model, target_model)
        refiner.add_class_anchors(classes(("Paper", "Paper")))

        candidates = instances(("paper1", "p1"), ("alice", "a_smith"))
        enhanced = refiner.validate_instance_anchors(candidates)

        assert enhanced == instances(("paper1", "p1"))
        assert len(candidates) == 2
