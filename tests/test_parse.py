import pytest
from rdflib import Graph, Literal, URIRef
from rdflib.namespace import OWL, RDF, RDFS

from fcamap.data_structures import EntityType
from fcamap.errors import OntologyLoadError
from fcamap.parse import OntologyModel

SRC = "http://example.org/source#"
TGT = "http://example.org/target#"
EX = "http://example.org/"


class TestOntologyModel:
    def test_entities(self, source_model):
        assert source_model.classes() == {SRC + "Paper", SRC + "Author", SRC + "Reviewer"}
        assert source_model.datatype_properties() == {SRC + "title"}
        assert source_model.object_properties() == {SRC + "hasAuthor"}
        assert source_model.properties() == set()
        assert source_model.instances() == {SRC + "paper1", SRC + "alice"}

    def test_entities_by_type(self, source_model):
        assert source_model.entities(EntityType.CLASS) == source_model.classes()
        assert source_model.entity_type(SRC + "title") == EntityType.DATATYPE_PROPERTY
        assert source_model.entity_type(SRC + "hasAuthor") == EntityType.OBJECT_PROPERTY
        assert source_model.entity_type(SRC + "alice") == EntityType.INSTANCE
        assert source_model.entity_type(TGT + "Paper") == EntityType.UNKNOWN

        with pytest.raises(ValueError):
            source_model.entities(EntityType.UNKNOWN)

    def test_extract_types(self, source_model):
        """Classes only used as rdf:type of individuals become classes."""
        assert source_model.extract_types() == {SRC + "Workshop"}
        assert SRC + "Workshop" in source_model.classes()
        assert SRC + "workshop1" in source_model.instances()
        # Nothing new the second time
        assert source_model.extract_types() == set()

    def test_labels(self, source_model, target_model):
        assert source_model.labels(SRC + "paper1") == {"paper1", "Formal Concept Analysis for Matching"}
        assert source_model.labels(SRC + "Paper") == {"Paper"}
        assert target_model.labels(TGT + "Referee") == {"Referee", "Reviewer"}

    def test_structure(self, source_model):
        assert source_model.types(SRC + "paper1") == {SRC + "Paper"}
        assert source_model.instances_of(SRC + "Author") == {SRC + "alice"}
        assert source_model.domains(SRC + "hasAuthor") == {SRC + "Paper"}
        assert source_model.ranges(SRC + "hasAuthor") == {SRC + "Author"}

    def test_statistics(self, source_model):
        stats = source_model.statistics()
        assert stats["classes"] == 3
        assert stats["instances"] == 2
        assert stats["triples"] > 0

    def test_from_graph(self):
        """Plain rdf:Property resources and subclasses in a hand-built graph."""
        graph = Graph()
        Person = URIRef(EX + "Person")
        Student = URIRef(EX + "Student")
        knows = URIRef(EX + "knows")

        graph.add((Person, RDF.type, RDFS.Class))
        graph.add((Student, RDF.type, OWL.Class))
        graph.add((Student, RDFS.subClassOf, Person))
        graph.add((knows, RDF.type, RDF.Property))
        graph.add((knows, RDFS.label, Literal("knows")))

        model = OntologyModel(graph)
        assert model.path is None
        assert model.classes() == {EX + "Person", EX + "Student"}
        assert model.properties() == {EX + "knows"}
        assert model.entity_type(EX + "knows") == EntityType.PROPERTY
        assert model.superclasses(EX + "Student") == {EX + "Person"}

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.ttl"
        with pytest.raises(OntologyLoadError) as exc_info:
            OntologyModel(path)
        assert exc_info.value.path == str(path)
        assert isinstance(exc_info.value, OSError)

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.ttl"
        path.write_text("@prefix : <http://example.org/> .\n:a :b \n", encoding="utf-8")
        with pytest.raises(OntologyLoadError):
            OntologyModel(path)

    def test_close_is_idempotent(self, data_dir):
        model = OntologyModel(data_dir / "source.ttl")
        model.close()
        model.close()
        assert model.closed
        assert model.classes() == set()

    def test_context_manager(self, data_dir):
        with OntologyModel(data_dir / "target.ttl") as model:
            assert TGT + "Referee" in model.classes()
        assert model.closed
