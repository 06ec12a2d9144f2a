"""
DESCRIPTION:

    Ontology Model.

    Loads an OWL/RDFS ontology with rdflib and exposes what the matchers need:
    the URIs of its classes, properties and instances, their names, and the
    typing/domain/range links between them.
"""

from pathlib import Path
from typing import Dict, Optional, Set, Union

from loguru import logger
from rdflib import Graph, URIRef
from rdflib.namespace import OWL, RDF, RDFS, SKOS

from fcamap.data_structures import EntityType
from fcamap.errors import OntologyLoadError
from fcamap.lexicon import local_name

# Vocabulary terms that are never ontology classes of their own
_BUILTIN_NAMESPACES = (str(OWL), str(RDF), str(RDFS), "http://www.w3.org/2001/XMLSchema#")

_FORMATS_BY_SUFFIX = {
    ".ttl": "turtle",
    ".nt": "nt",
    ".n3": "n3",
    ".jsonld": "json-ld",
    ".owl": "xml",
    ".rdf": "xml",
    ".xml": "xml",
}


def _is_builtin(uri: URIRef) -> bool:
    return str(uri).startswith(_BUILTIN_NAMESPACES)


class OntologyModel:
    """
    An ontology loaded into an rdflib Graph.

    Entities are identified by their URI strings. Call `close()` (or use the
    model as a context manager) when done; closing twice is harmless.
    """

    def __init__(self, source: Union[str, Path, Graph], format: Optional[str] = None):
        """
        Loads the ontology.

        Args:
            source: Path to an ontology file, or an already populated rdflib Graph.
            format: rdflib parser name; guessed from the file suffix if omitted.

        Raises:
            OntologyLoadError: If the file cannot be read or parsed.
        """
        if isinstance(source, Graph):
            self.path: Optional[str] = None
            self.graph = source
        else:
            self.path = str(source)
            self.graph = Graph()
            fmt = format or _FORMATS_BY_SUFFIX.get(Path(self.path).suffix.lower())
            try:
                self.graph.parse(self.path, format=fmt)
            except Exception as e:
                raise OntologyLoadError(self.path, f"Error parsing ontology file: {e}") from e

        # Classes only known through rdf:type of individuals (see extract_types)
        self._extracted_classes: Set[str] = set()
        self._closed = False

        logger.info(f"Loaded ontology {self.path or '<graph>'}:")
        logger.info(f"\t{len(self.classes())} Classes")
        logger.info(f"\t{len(self.datatype_properties())} Datatype Properties")
        logger.info(f"\t{len(self.object_properties())} Object Properties")
        logger.info(f"\t{len(self.instances())} Instances")

    # ------------------------------- ENTITIES --------------------------------- #

    def _subjects_of_type(self, rdf_type: URIRef) -> Set[str]:
        return {str(s) for s in self.graph.subjects(RDF.type, rdf_type) if isinstance(s, URIRef) and not _is_builtin(s)}

    def classes(self) -> Set[str]:
        declared = self._subjects_of_type(OWL.Class) | self._subjects_of_type(RDFS.Class)
        return declared | self._extracted_classes

    def datatype_properties(self) -> Set[str]:
        return self._subjects_of_type(OWL.DatatypeProperty)

    def object_properties(self) -> Set[str]:
        return self._subjects_of_type(OWL.ObjectProperty)

    def properties(self) -> Set[str]:
        """Plain rdf:Property resources that are neither datatype nor object properties."""
        return self._subjects_of_type(RDF.Property) - self.datatype_properties() - self.object_properties()

    def instances(self) -> Set[str]:
        """Named individuals and resources typed with one of the ontology's classes."""
        classes = {URIRef(c) for c in self.classes()}
        found = self._subjects_of_type(OWL.NamedIndividual)
        for s, o in self.graph.subject_objects(RDF.type):
            if isinstance(s, URIRef) and o in classes:
                found.add(str(s))
        return found - self.classes()

    def entities(self, entity_type: EntityType) -> Set[str]:
        getters = {
            EntityType.CLASS: self.classes,
            EntityType.DATATYPE_PROPERTY: self.datatype_properties,
            EntityType.OBJECT_PROPERTY: self.object_properties,
            EntityType.PROPERTY: self.properties,
            EntityType.INSTANCE: self.instances,
        }
        if entity_type not in getters:
            raise ValueError(f"No entities of type {entity_type}")
        return getters[entity_type]()

    def entity_types(self) -> Dict[str, EntityType]:
        """Every entity URI of this ontology mapped to its category."""
        types: Dict[str, EntityType] = {}
        # Later categories do not override earlier ones
        for entity_type in (
            EntityType.CLASS,
            EntityType.DATATYPE_PROPERTY,
            EntityType.OBJECT_PROPERTY,
            EntityType.PROPERTY,
            EntityType.INSTANCE,
        ):
            for uri in self.entities(entity_type):
                types.setdefault(uri, entity_type)
        return types

    def entity_type(self, uri: str) -> EntityType:
        """Category of an entity of this ontology (UNKNOWN if it is not one)."""
        return self.entity_types().get(str(uri), EntityType.UNKNOWN)

    def extract_types(self) -> Set[str]:
        """
        Adds every non-builtin rdf:type object of an individual as a class,
        even if the ontology never declares it.

        Returns:
            Set[str]: The newly discovered classes.
        """
        declared = self._subjects_of_type(OWL.Class) | self._subjects_of_type(RDFS.Class)
        schema_types = {OWL.Class, RDFS.Class, OWL.ObjectProperty, OWL.DatatypeProperty, RDF.Property}

        extracted = set()
        for s, o in self.graph.subject_objects(RDF.type):
            if not isinstance(o, URIRef) or _is_builtin(o) or o in schema_types:
                continue
            if str(o) not in declared:
                extracted.add(str(o))

        new = extracted - self._extracted_classes
        self._extracted_classes |= extracted
        if new:
            logger.debug(f"Extracted {len(new)} undeclared classes from rdf:type of individuals")
        return new

    # ------------------------------- FEATURES --------------------------------- #

    def labels(self, uri: str) -> Set[str]:
        """rdfs:label, skos:prefLabel and skos:altLabel values plus the local name."""
        ref = URIRef(uri)
        names = {local_name(uri)}
        for predicate in (RDFS.label, SKOS.prefLabel, SKOS.altLabel):
            names.update(str(o) for o in self.graph.objects(ref, predicate))
        return {n for n in names if n}

    def types(self, uri: str) -> Set[str]:
        return {str(o) for o in self.graph.objects(URIRef(uri), RDF.type) if isinstance(o, URIRef) and not _is_builtin(o)}

    def instances_of(self, class_uri: str) -> Set[str]:
        return {str(s) for s in self.graph.subjects(RDF.type, URIRef(class_uri)) if isinstance(s, URIRef)}

    def superclasses(self, class_uri: str) -> Set[str]:
        return {
            str(o) for o in self.graph.objects(URIRef(class_uri), RDFS.subClassOf) if isinstance(o, URIRef) and not _is_builtin(o)
        }

    def domains(self, property_uri: str) -> Set[str]:
        return {str(o) for o in self.graph.objects(URIRef(property_uri), RDFS.domain) if isinstance(o, URIRef)}

    def ranges(self, property_uri: str) -> Set[str]:
        return {str(o) for o in self.graph.objects(URIRef(property_uri), RDFS.range) if isinstance(o, URIRef)}

    def statistics(self) -> Dict[str, int]:
        return {
            "triples": len(self.graph),
            "classes": len(self.classes()),
            "datatype_properties": len(self.datatype_properties()),
            "object_properties": len(self.object_properties()),
            "instances": len(self.instances()),
        }

    # ------------------------------- LIFECYCLE -------------------------------- #

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Releases the underlying graph. Safe to call more than once."""
        if self._closed:
            return
        self.graph.close()
        self.graph = Graph()
        self._extracted_classes = set()
        self._closed = True

    def __enter__(self) -> "OntologyModel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"OntologyModel({self.path or '<graph>'})"
