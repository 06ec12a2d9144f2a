"""
DESCRIPTION:

    Alignment I/O.

    Reads and writes mappings in the OAEI Alignment format (RDF/XML), used to
    exchange alignments and to compare a computed mapping with a reference.

    FORMAT:
    ------
    <rdf:RDF xmlns="http://knowledgeweb.semanticweb.org/heterogeneity/alignment#" ...>
      <Alignment>
        <map>
          <Cell>
            <entity1 rdf:resource="http://source.org#Paper"/>
            <entity2 rdf:resource="http://target.org#Paper"/>
            <relation>=</relation>
            <measure rdf:datatype="http://www.w3.org/2001/XMLSchema#float">1.0</measure>
          </Cell>
        </map>
      </Alignment>
    </rdf:RDF>
"""

from pathlib import Path
from typing import Dict, Optional, Union

from loguru import logger
from rdflib import BNode, Graph, Literal, Namespace, URIRef
from rdflib.namespace import RDF, XSD

from fcamap.data_structures import EntityType, Mapping
from fcamap.errors import AlignmentFormatError
from fcamap.parse import OntologyModel

ALIGN = Namespace("http://knowledgeweb.semanticweb.org/heterogeneity/alignment#")
# Many published alignments declare the namespace without the trailing "#"
ALIGN_LEGACY = Namespace("http://knowledgeweb.semanticweb.org/heterogeneity/alignment")


def _entity_types(model: Optional[OntologyModel]) -> Dict[str, EntityType]:
    return model.entity_types() if model is not None else {}


def read_alignment(
    path: Union[str, Path],
    source: Optional[OntologyModel] = None,
    target: Optional[OntologyModel] = None,
) -> Mapping:
    """
    Reads an alignment file into a Mapping.

    The Alignment format does not record what kind of entities a cell relates,
    so the categories are looked up in the source (then target) ontology when
    given, and are UNKNOWN otherwise.

    Args:
        path: Path to the RDF/XML alignment file.
        source: Optional source ontology, to resolve entity categories.
        target: Optional target ontology, to resolve entity categories.

    Raises:
        AlignmentFormatError: If the file cannot be parsed or a cell is incomplete.
    """
    graph = Graph()
    try:
        graph.parse(str(path), format="xml")
    except Exception as e:
        raise AlignmentFormatError(str(path), f"Error parsing alignment file: {e}") from e

    source_types = _entity_types(source)
    target_types = _entity_types(target)

    mapping = Mapping()
    for ns in (ALIGN, ALIGN_LEGACY):
        for cell, entity1 in graph.subject_objects(ns.entity1):
            entity2 = graph.value(cell, ns.entity2)
            if entity2 is None:
                raise AlignmentFormatError(str(path), f"Cell {cell} has no entity2")

            relation = graph.value(cell, ns.relation)
            measure = graph.value(cell, ns.measure)

            entity_type = source_types.get(str(entity1)) or target_types.get(str(entity2)) or EntityType.UNKNOWN
            try:
                measure_value = float(measure) if measure is not None else 1.0
            except ValueError as e:
                raise AlignmentFormatError(str(path), f"Cell {cell} has an invalid measure {measure!r}") from e

            mapping.add(
                str(entity1),
                str(entity2),
                entity_type,
                relation=str(relation) if relation is not None else "=",
                measure=measure_value,
            )

    logger.info(f"Read {len(mapping)} correspondences from {path}")
    return mapping


def alignment_graph(mapping: Mapping, onto1: str = "", onto2: str = "") -> Graph:
    """Builds the RDF graph of a mapping in the Alignment vocabulary."""
    graph = Graph()
    graph.bind("align", ALIGN)

    alignment = BNode()
    graph.add((alignment, RDF.type, ALIGN.Alignment))
    graph.add((alignment, ALIGN.level, Literal("0")))
    graph.add((alignment, ALIGN.type, Literal("??")))
    if onto1:
        graph.add((alignment, ALIGN.onto1, URIRef(onto1)))
    if onto2:
        graph.add((alignment, ALIGN.onto2, URIRef(onto2)))

    for c in sorted(mapping, key=lambda c: (c.source, c.target, c.entity_type.value)):
        cell = BNode()
        graph.add((alignment, ALIGN.map, cell))
        graph.add((cell, RDF.type, ALIGN.Cell))
        graph.add((cell, ALIGN.entity1, URIRef(c.source)))
        graph.add((cell, ALIGN.entity2, URIRef(c.target)))
        graph.add((cell, ALIGN.relation, Literal(c.relation)))
        graph.add((cell, ALIGN.measure, Literal(c.measure, datatype=XSD.float)))

    return graph


def write_alignment(mapping: Mapping, path: Union[str, Path], onto1: str = "", onto2: str = "") -> None:
    """Writes a mapping as an RDF/XML alignment file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    alignment_graph(mapping, onto1, onto2).serialize(destination=str(path), format="pretty-xml")
    logger.info(f"Wrote {len(mapping)} correspondences to {path}")
