"""
DESCRIPTION:
    Validator for Concept Lattices.

    Verifies a built lattice against:
    1. Order consistency (every edge respects extent/intent containment)
    2. Acyclicity
    3. Covering property (no edge implied by a longer path)
    4. Reachability (everything below the top, everything above the bottom)

    Debugging aid only; the lattice never runs it on its own.
"""

from typing import Any, Callable, Dict, List

import networkx as nx

from fcamap.lattice import ConceptLattice


class LatticeValidator:
    """
    Validates ConceptLattice objects against the structural invariants of a Hasse diagram.

    Extensibility:
    New checks can be added by defining a method `check_custom_thing(self, lattice) -> List[str]`
    and adding it to `self.checks` list in `__init__`.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

        # Registry of validation checks
        # Each check should return a list of error strings (empty if passed)
        self.checks: List[Callable[[ConceptLattice], List[str]]] = [
            self.check_order,
            self.check_acyclic,
            self.check_covering,
            self.check_reachability,
        ]

    def validate(self, lattice: ConceptLattice) -> Dict[str, Any]:
        """
        Run all validation checks on the lattice.

        Returns:
            Dict containing:
            - 'valid': bool
            - 'errors': List[str]
            - 'stats': Dict of validation statistics
        """
        all_errors = []

        for check in self.checks:
            errors = check(lattice)
            if errors:
                all_errors.extend(errors)

        return {
            "valid": len(all_errors) == 0,
            "errors": all_errors,
            "stats": {
                "n_checks": len(self.checks),
                "n_concepts": len(lattice),
                "n_edges": sum(1 for _ in lattice.edges()),
            },
        }

    def check_order(self, lattice: ConceptLattice) -> List[str]:
        """
        Check that every edge parent -> child has parent.extent ⊇ child.extent
        and child.intent ⊇ parent.intent.
        """
        errors = []

        for parent_id, child_id in lattice.edges():
            parent = lattice.concept_of(parent_id)
            child = lattice.concept_of(child_id)
            if not parent.extent >= child.extent:
                errors.append(f"Order Violation: extent of {child} is not contained in extent of {parent}")
            if not child.intent >= parent.intent:
                errors.append(f"Order Violation: intent of {parent} is not contained in intent of {child}")

        return errors

    def check_acyclic(self, lattice: ConceptLattice) -> List[str]:
        G = lattice.to_networkx()
        if nx.is_directed_acyclic_graph(G):
            return []
        cycle = nx.find_cycle(G)
        return [f"Cycle: covering relation contains the cycle {cycle}"]

    def check_covering(self, lattice: ConceptLattice) -> List[str]:
        """
        Check that no edge is redundant, i.e. the edge set equals its own transitive reduction.
        """
        G = lattice.to_networkx()
        if not nx.is_directed_acyclic_graph(G):
            # Reported by check_acyclic
            return []

        reduced = nx.transitive_reduction(G)
        redundant = set(G.edges()) - set(reduced.edges())
        return [
            f"Redundant Edge: {lattice.concept_of(u)} -> {lattice.concept_of(v)} is implied by a longer path"
            for u, v in sorted(redundant)
        ]

    def check_reachability(self, lattice: ConceptLattice) -> List[str]:
        """
        Check that every concept is reachable from the top and reaches the bottom.
        Skipped for a side whose top/bottom concept is missing.
        """
        errors = []
        G = lattice.to_networkx()

        if lattice.top is not None:
            below_top = nx.descendants(G, lattice.top_id) | {lattice.top_id}
            for idx in sorted(set(G.nodes) - below_top):
                errors.append(f"Unreachable: {lattice.concept_of(idx)} is not below the top concept")

        if lattice.bottom is not None:
            above_bottom = nx.ancestors(G, lattice.bottom_id) | {lattice.bottom_id}
            for idx in sorted(set(G.nodes) - above_bottom):
                errors.append(f"Unreachable: {lattice.concept_of(idx)} is not above the bottom concept")

        return errors
