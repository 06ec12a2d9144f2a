"""
DESCRIPTION:

    Concept Lattice.

    Orders a finite set of formal concepts into a lattice and stores its
    covering relation (Hasse diagram) in both directions.

    Concepts live in an arena: each one gets a dense integer id, and the
    adjacency stores only ids. Ids follow a deterministic total order
    (descending extent size, ascending intent size, string form, then the
    element reprs), which is also the insertion order of the top-down build.
    Inserting the most general concepts first guarantees every new concept
    finds its parents already in place, so one breadth-first search from the
    top locates it.
"""

from collections import defaultdict, deque
from typing import Deque, Dict, FrozenSet, Generic, Iterable, Iterator, Optional, Set, Tuple

import graphviz
import networkx as nx
from loguru import logger

from fcamap.data_structures import A, Concept, O
from fcamap.errors import LatticeError

# Sentinel ids for a top or bottom concept missing from the supplied concepts
TOP_NOT_FOUND = -1
BOTTOM_NOT_FOUND = -2


def _element_key(elements: FrozenSet) -> Tuple[Tuple[str, str], ...]:
    # Independent of set iteration order, which varies with the hash seed
    return tuple(sorted((type(e).__name__, repr(e)) for e in elements))


def identity_key(concept: Concept) -> Tuple:
    """
    Sort key used to assign concept ids.

    Concepts whose string forms coincide (e.g. 1 and "1") are ordered by
    the type names and reprs of their elements.
    """
    return (
        -len(concept.extent),
        len(concept.intent),
        str(concept),
        _element_key(concept.extent),
        _element_key(concept.intent),
    )


def derive_top(concepts: Iterable[Concept[O, A]]) -> Concept[O, A]:
    """Top concept: union of all extents, intersection of all intents."""
    concepts = list(concepts)
    extent: Set[O] = set()
    intent: Optional[Set[A]] = None
    for c in concepts:
        extent |= c.extent
        intent = set(c.intent) if intent is None else intent & c.intent
    return Concept(extent, intent or ())


def derive_bottom(concepts: Iterable[Concept[O, A]]) -> Concept[O, A]:
    """Bottom concept: intersection of all extents, union of all intents."""
    concepts = list(concepts)
    extent: Optional[Set[O]] = None
    intent: Set[A] = set()
    for c in concepts:
        intent |= c.intent
        extent = set(c.extent) if extent is None else extent & c.extent
    return Concept(extent or (), intent)


class ConceptLattice(Generic[O, A]):
    """
    A concept lattice over a set of formal concepts.

    Construction is lenient: if the top or bottom concept is not among the
    supplied concepts, its id is recorded as TOP_NOT_FOUND / BOTTOM_NOT_FOUND
    and the lattice is still built on a best-effort basis (a missing top acts
    as a virtual root). Pass `strict=True` to raise LatticeError instead.

    The lattice is built once; to change the concept set, build a new one.
    It is not safe for concurrent mutation.
    """

    def __init__(
        self,
        concepts: Iterable[Concept[O, A]],
        top: Optional[Concept[O, A]] = None,
        bottom: Optional[Concept[O, A]] = None,
        strict: bool = False,
    ):
        """
        Args:
            concepts: The formal concepts. Structural duplicates collapse into one id.
            top: Explicit top concept; derived from `concepts` if omitted.
            bottom: Explicit bottom concept; derived from `concepts` if omitted.
            strict: Raise LatticeError if top or bottom is not among `concepts`.
        """
        unique = set(concepts)

        if top is None:
            top = derive_top(unique)
        if bottom is None:
            bottom = derive_bottom(unique)

        # Arena: id <-> concept
        self._id_to_concept: Dict[int, Concept[O, A]] = {}
        self._concept_to_id: Dict[Concept[O, A], int] = {}
        for idx, c in enumerate(sorted(unique, key=identity_key)):
            self._id_to_concept[idx] = c
            self._concept_to_id[c] = idx

        self._top_id = self._concept_to_id.get(top, TOP_NOT_FOUND)
        self._bottom_id = self._concept_to_id.get(bottom, BOTTOM_NOT_FOUND)

        if self._top_id == TOP_NOT_FOUND or self._bottom_id == BOTTOM_NOT_FOUND:
            missing = [
                name
                for name, idx, sentinel in (
                    ("top", self._top_id, TOP_NOT_FOUND),
                    ("bottom", self._bottom_id, BOTTOM_NOT_FOUND),
                )
                if idx == sentinel
            ]
            if strict:
                raise LatticeError(f"Concept lattice is missing its {' and '.join(missing)} concept")
            logger.debug(f"Concept lattice without {' and '.join(missing)} concept; using sentinel id(s)")

        # Covering relation, both directions. Sets are created on first reference.
        self._top_down: Dict[int, Set[int]] = defaultdict(set)
        self._bottom_up: Dict[int, Set[int]] = defaultdict(set)
        self._built_top_down = False
        self._built_bottom_up = False

    # ------------------------------- IDENTITIES ------------------------------- #

    @property
    def top_id(self) -> int:
        return self._top_id

    @property
    def bottom_id(self) -> int:
        return self._bottom_id

    @property
    def top(self) -> Optional[Concept[O, A]]:
        """The top concept, or None if it was not among the supplied concepts."""
        return self._id_to_concept.get(self._top_id)

    @property
    def bottom(self) -> Optional[Concept[O, A]]:
        """The bottom concept, or None if it was not among the supplied concepts."""
        return self._id_to_concept.get(self._bottom_id)

    def id_of(self, concept: Concept[O, A]) -> int:
        return self._concept_to_id[concept]

    def concept_of(self, concept_id: int) -> Concept[O, A]:
        return self._id_to_concept[concept_id]

    @property
    def concepts(self) -> Tuple[Concept[O, A], ...]:
        """All concepts, in id order."""
        return tuple(self._id_to_concept[i] for i in range(len(self)))

    def __len__(self) -> int:
        return len(self._id_to_concept)

    def __iter__(self) -> Iterator[Concept[O, A]]:
        return iter(self.concepts)

    def __contains__(self, concept: object) -> bool:
        return concept in self._concept_to_id

    # ----------------------------- ORDER TESTS -------------------------------- #

    def _is_up_down(self, up_id: int, down_id: int) -> bool:
        """True if `up` lies above `down` by extent containment."""
        if up_id == down_id:
            return False
        up, down = self._id_to_concept.get(up_id), self._id_to_concept.get(down_id)
        if up is None or down is None or up == down:
            return False
        return up.extent >= down.extent

    def _is_down_up(self, down_id: int, up_id: int) -> bool:
        """True if `down` lies below `up` by intent containment."""
        if down_id == up_id:
            return False
        down, up = self._id_to_concept.get(down_id), self._id_to_concept.get(up_id)
        if up is None or down is None or up == down:
            return False
        return down.intent >= up.intent

    # -------------------------------- BUILDING -------------------------------- #

    def build_top_down(self) -> None:
        """
        Builds the covering relation from the top down.

        Every concept except the top is inserted, in id order, by a
        breadth-first search from the top. At each candidate parent p, each
        direct child c is tested against the new concept x:
            - x above c (extent containment): x is spliced in between p and c
            - x below c (intent containment): continue the search below c
        If no child absorbed x, x becomes a direct child of p.

        Idempotent.
        """
        if self._built_top_down:
            return

        for c_id in range(len(self)):
            if c_id == self._top_id:
                continue

            parent_queue: Deque[int] = deque([self._top_id])
            visited: Set[int] = set()

            while parent_queue:
                p_id = parent_queue.popleft()
                if p_id in visited:
                    continue
                visited.add(p_id)

                children = self._top_down[p_id]
                if not children:
                    children.add(c_id)
                    continue

                absorbed = False
                for child_id in list(children):
                    if child_id == c_id:
                        continue

                    if self._is_up_down(c_id, child_id):
                        # Rewire p -> child into p -> c -> child
                        children.discard(child_id)
                        children.add(c_id)
                        self._top_down[c_id].add(child_id)
                        absorbed = True
                    elif self._is_down_up(c_id, child_id):
                        parent_queue.append(child_id)
                        absorbed = True

                if not absorbed:
                    children.add(c_id)

        self._built_top_down = True
        logger.debug(f"Built concept lattice top-down: {len(self)} concepts, {sum(1 for _ in self.edges())} edges")

    def build_bottom_up(self) -> None:
        """
        Builds the upward covering relation by inverting the top-down one.

        Triggers the top-down build first if it has not been run. Idempotent.
        """
        if self._built_bottom_up:
            return
        self.build_top_down()

        for parent_id, children in self._top_down.items():
            for child_id in children:
                self._bottom_up[child_id].add(parent_id)

        self._built_bottom_up = True

    # --------------------------------- QUERIES -------------------------------- #

    def children(self, concept_id: int) -> FrozenSet[int]:
        """Ids of the direct subconcepts."""
        self.build_top_down()
        return frozenset(self._top_down.get(concept_id, ()))

    def parents(self, concept_id: int) -> FrozenSet[int]:
        """Ids of the direct superconcepts."""
        self.build_bottom_up()
        return frozenset(self._bottom_up.get(concept_id, ()))

    def edges(self) -> Iterator[Tuple[int, int]]:
        """(parent_id, child_id) covering edges between real concepts, sentinels excluded."""
        self.build_top_down()
        for parent_id in sorted(self._top_down):
            if parent_id not in self._id_to_concept:
                continue
            for child_id in sorted(self._top_down[parent_id]):
                yield parent_id, child_id

    def get_sup_sub_concepts(self) -> Dict[Concept[O, A], Set[Concept[O, A]]]:
        """Maps every concept to the set of its direct subconcepts."""
        self.build_top_down()
        return {
            concept: {self._id_to_concept[i] for i in self._top_down.get(idx, ())}
            for idx, concept in self._id_to_concept.items()
        }

    def get_sub_sup_concepts(self) -> Dict[Concept[O, A], Set[Concept[O, A]]]:
        """Maps every concept to the set of its direct superconcepts (sentinels excluded)."""
        self.build_bottom_up()
        return {
            concept: {self._id_to_concept[i] for i in self._bottom_up.get(idx, ()) if i in self._id_to_concept}
            for idx, concept in self._id_to_concept.items()
        }

    def roots(self) -> FrozenSet[int]:
        """Ids of concepts with no superconcept (just the top in a well-formed lattice)."""
        self.build_bottom_up()
        return frozenset(i for i in self._id_to_concept if not self.parents(i) - {TOP_NOT_FOUND})

    # --------------------------------- EXPORT --------------------------------- #

    def to_networkx(self) -> nx.DiGraph:
        """
        Directed graph of the covering relation (parent -> child).

        Nodes are concept ids with the concept stored under the "concept" attribute.
        """
        self.build_top_down()
        G = nx.DiGraph()
        for idx, concept in self._id_to_concept.items():
            G.add_node(idx, concept=concept)
        G.add_edges_from(self.edges())
        return G

    def _create_graphviz(self) -> graphviz.Graph:
        self.build_top_down()
        dot = graphviz.Graph(comment="Concept Lattice")
        for idx, concept in sorted(self._id_to_concept.items()):
            # Backslashes are escaped here, graphviz escapes the quotes
            dot.node(str(idx), label=str(concept).replace("\\", "\\\\"))
        for parent_id, child_id in self.edges():
            dot.edge(str(parent_id), str(child_id))
        return dot

    def to_dot(self) -> str:
        """DOT source of the lattice (undirected covering edges, nodes labelled by concept)."""
        if not self._id_to_concept:
            return "graph {\n}\n"
        return self._create_graphviz().source

    def save_visualization(self, filepath: str, format: str = "pdf", title: Optional[str] = None) -> None:
        """
        Renders the lattice to file (requires the Graphviz binaries).

        Args:
            filepath: Output file path (without extension)
            format: Output format ("pdf", "png", "svg")
            title: Optional title for the graph
        """
        dot = self._create_graphviz()
        if title:
            dot.attr(label=title, labelloc="t", fontsize="16")
        dot.render(filepath, format=format, cleanup=True)
        logger.info(f"Saved lattice visualization to {filepath}.{format}")

    def __repr__(self) -> str:
        return f"ConceptLattice({len(self)} concepts, top={self._top_id}, bottom={self._bottom_id})"
