"""
Neighbor counting over a fact population.

Two facts at different positions are neighbors when any of these holds:

- same subject, or same object
- both validated and in the same category
- either one's category is listed in the other's dependencies
- same format tag, different document
- same category, different document

The relation is symmetric. Facts with identical ids at different positions
are distinct members of the population and count as each other's neighbors.
"""

import logging
from collections import Counter, defaultdict
from typing import Dict, FrozenSet, Hashable, List, NamedTuple, Optional, Sequence, Set

from .KnowledgeArchaeologyTypes import Fact

logger = logging.getLogger(__name__)


class _Signature(NamedTuple):
    """Every fact attribute the neighbor relation reads."""

    subject: str
    object: str
    category_id: Optional[str]
    validated: bool
    dependencies: FrozenSet[str]
    format_tag: str
    document: Optional[str]


def _signature(fact: Fact) -> _Signature:
    return _Signature(
        subject=fact.subject,
        object=fact.object,
        category_id=fact.category_id,
        validated=fact.validated,
        dependencies=frozenset(fact.dependencies),
        format_tag=fact.format_tag,
        document=fact.document,
    )


def _related(a: _Signature, b: _Signature) -> bool:
    if a.subject == b.subject or a.object == b.object:
        return True
    same_category = a.category_id is not None and a.category_id == b.category_id
    if same_category and a.validated and b.validated:
        return True
    if b.category_id is not None and b.category_id in a.dependencies:
        return True
    if a.category_id is not None and a.category_id in b.dependencies:
        return True
    different_document = a.document != b.document
    if different_document and a.format_tag == b.format_tag:
        return True
    return same_category and different_document


def is_neighbor(a: Fact, b: Fact) -> bool:
    """Neighbor relation for two facts at different positions."""
    return _related(_signature(a), _signature(b))


def count_neighbors_naive(facts: Sequence[Fact]) -> List[int]:
    """Pairwise O(n^2) reference implementation."""
    signatures = [_signature(fact) for fact in facts]
    counts = [0] * len(signatures)
    for i in range(len(signatures)):
        for j in range(i + 1, len(signatures)):
            if _related(signatures[i], signatures[j]):
                counts[i] += 1
                counts[j] += 1
    return counts


def _shares_format_or_category_elsewhere(a: _Signature, b: _Signature) -> bool:
    if a.document == b.document:
        return False
    return a.format_tag == b.format_tag or (a.category_id is not None and a.category_id == b.category_id)


class ConnectionGraphBuilder:
    """
    Indexed neighbor counting.

    Facts are collapsed into signature classes (facts the relation cannot
    tell apart) with multiplicities. The format and category clauses hold for
    whole groups at once, so the facts sharing a format or category with a
    class in another document are counted arithmetically from per-group
    tallies. Only the remaining clauses (subject, object, validated category
    and dependency) are checked class by class, over the classes sharing one
    of those buckets. Results are identical to `count_neighbors_naive`.
    """

    def count_neighbors(self, facts: Sequence[Fact]) -> List[int]:
        if not facts:
            return []

        signatures = [_signature(fact) for fact in facts]
        multiplicity = Counter(signatures)

        formats: Counter = Counter()
        categories: Counter = Counter()
        buckets: Dict[Hashable, Set[_Signature]] = defaultdict(set)
        for signature, own in multiplicity.items():
            formats[signature.format_tag] += own
            formats[(signature.format_tag, signature.document)] += own
            if signature.category_id is not None:
                categories[signature.category_id] += own
                categories[("document", signature.category_id, signature.document)] += own
                categories[("format", signature.category_id, signature.format_tag)] += own
                categories[("both", signature.category_id, signature.format_tag, signature.document)] += own
                buckets[("category", signature.category_id)].add(signature)
                if signature.validated:
                    buckets[("validated", signature.category_id)].add(signature)
            buckets[("subject", signature.subject)].add(signature)
            buckets[("object", signature.object)].add(signature)
            for dependency in signature.dependencies:
                buckets[("dependency", dependency)].add(signature)

        counts_by_signature: Dict[_Signature, int] = {}
        for signature, own in multiplicity.items():
            # Every other fact with the same signature shares its subject.
            total = own - 1
            total += formats[signature.format_tag] - formats[(signature.format_tag, signature.document)]
            category = signature.category_id
            if category is not None:
                total += categories[category] - categories[("document", category, signature.document)]
                total -= (
                    categories[("format", category, signature.format_tag)]
                    - categories[("both", category, signature.format_tag, signature.document)]
                )
            for candidate in self._candidates(signature, buckets):
                if candidate == signature or _shares_format_or_category_elsewhere(signature, candidate):
                    continue
                if _related(signature, candidate):
                    total += multiplicity[candidate]
            counts_by_signature[signature] = total

        logger.debug(f"Counted neighbors for {len(facts)} facts in {len(multiplicity)} signature classes")
        return [counts_by_signature[signature] for signature in signatures]

    @staticmethod
    def _candidates(signature: _Signature, buckets: Dict[Hashable, Set[_Signature]]) -> Set[_Signature]:
        keys: List[Hashable] = [("subject", signature.subject), ("object", signature.object)]
        if signature.category_id is not None:
            keys.append(("dependency", signature.category_id))
            if signature.validated:
                keys.append(("validated", signature.category_id))
        keys.extend(("category", dependency) for dependency in signature.dependencies)

        candidates: Set[_Signature] = set()
        for key in keys:
            candidates.update(buckets.get(key, ()))
        return candidates
