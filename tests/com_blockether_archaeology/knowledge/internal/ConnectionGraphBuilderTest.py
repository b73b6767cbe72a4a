"""Tests for neighbor counting: relation rules, symmetry and indexed/naive agreement."""

import itertools
import random
import time
from typing import List, Optional

import pytest

from com_blockether_archaeology.knowledge.internal.ConnectionGraphBuilder import (
    ConnectionGraphBuilder,
    count_neighbors_naive,
    is_neighbor,
)
from com_blockether_archaeology.knowledge.internal.KnowledgeArchaeologyTypes import Fact


def make_fact(
    subject: str = "S",
    obj: str = "o",
    category_id: Optional[str] = None,
    validated: bool = False,
    dependencies: Optional[List[str]] = None,
    format_tag: str = "markdown",
    document: Optional[str] = "a.md",
) -> Fact:
    return Fact(
        subject=subject,
        predicate="implements",
        object=obj,
        category_id=category_id,
        validated=validated,
        dependencies=dependencies or [],
        format_tag=format_tag,
        document=document,
    )


def random_population(seed: int, size: int) -> List[Fact]:
    rng = random.Random(seed)
    categories = [None, "alpha", "beta", "gamma"]
    facts = []
    for _ in range(size):
        category = rng.choice(categories)
        facts.append(
            make_fact(
                subject=rng.choice(["Alpha System", "Beta System", "Gamma System", "JSON Structure"]),
                obj=rng.choice(["matrix", "vector", "graph", "tree", "wave", "cell"]),
                category_id=category,
                validated=rng.random() < 0.3,
                dependencies=rng.sample(["alpha", "beta", "gamma"], k=rng.randint(0, 2)),
                format_tag=rng.choice(["markdown", "python", "json"]),
                document=rng.choice([None, "a.md", "b.py", "c.json", "d.md"]),
            )
        )
    return facts


class TestNeighborRelation:
    @pytest.mark.parametrize(
        "left, right, expected",
        [
            (make_fact(subject="X", obj="1", document="a"), make_fact(subject="X", obj="2", document="a"), True),
            (make_fact(subject="X", obj="1", document="a"), make_fact(subject="Y", obj="1", document="a"), True),
            (
                make_fact(subject="X", obj="1", category_id="c", validated=True),
                make_fact(subject="Y", obj="2", category_id="c", validated=True),
                True,
            ),
            (
                make_fact(subject="X", obj="1", category_id="c", validated=True),
                make_fact(subject="Y", obj="2", category_id="c", validated=False),
                False,
            ),
            (
                make_fact(subject="X", obj="1", category_id="c", dependencies=["d"]),
                make_fact(subject="Y", obj="2", category_id="d"),
                True,
            ),
            (
                make_fact(subject="X", obj="1", format_tag="python", document="a.py"),
                make_fact(subject="Y", obj="2", format_tag="python", document="b.py"),
                True,
            ),
            (
                make_fact(subject="X", obj="1", format_tag="python", document="a.py"),
                make_fact(subject="Y", obj="2", format_tag="python", document="a.py"),
                False,
            ),
            (
                make_fact(subject="X", obj="1", category_id="c", format_tag="python", document="a.py"),
                make_fact(subject="Y", obj="2", category_id="c", format_tag="text", document="b.txt"),
                True,
            ),
            (
                make_fact(subject="X", obj="1", format_tag="python", document="a.py"),
                make_fact(subject="Y", obj="2", format_tag="text", document="b.txt"),
                False,
            ),
        ],
        ids=[
            "shared-subject",
            "shared-object",
            "validated-same-category",
            "one-unvalidated",
            "dependency",
            "same-format-other-document",
            "same-format-same-document",
            "same-category-other-document",
            "unrelated",
        ],
    )
    def test_rules(self, left: Fact, right: Fact, expected: bool) -> None:
        assert is_neighbor(left, right) is expected
        assert is_neighbor(right, left) is expected

    @pytest.mark.parametrize("seed", range(5))
    def test_relation_is_symmetric(self, seed: int) -> None:
        facts = random_population(seed, 30)

        for left, right in itertools.combinations(facts, 2):
            assert is_neighbor(left, right) == is_neighbor(right, left)


class TestConnectionGraphBuilder:
    def test_empty_population(self) -> None:
        assert ConnectionGraphBuilder().count_neighbors([]) == []

    def test_single_fact_is_isolated(self) -> None:
        assert ConnectionGraphBuilder().count_neighbors([make_fact()]) == [0]

    def test_identical_facts_are_mutual_neighbors(self) -> None:
        facts = [make_fact() for _ in range(3)]

        assert ConnectionGraphBuilder().count_neighbors(facts) == [2, 2, 2]

    @pytest.mark.parametrize("seed, size", [(0, 10), (1, 50), (2, 120), (3, 200), (4, 7)])
    def test_indexed_matches_naive(self, seed: int, size: int) -> None:
        facts = random_population(seed, size)

        assert ConnectionGraphBuilder().count_neighbors(facts) == count_neighbors_naive(facts)

    def test_naive_counts_are_consistent_with_relation(self) -> None:
        facts = random_population(42, 25)
        counts = count_neighbors_naive(facts)

        for i, fact in enumerate(facts):
            expected = sum(1 for j, other in enumerate(facts) if j != i and is_neighbor(fact, other))
            assert counts[i] == expected

    def test_input_is_not_mutated(self) -> None:
        facts = random_population(7, 20)
        snapshot = [fact.model_dump() for fact in facts]

        ConnectionGraphBuilder().count_neighbors(facts)

        assert [fact.model_dump() for fact in facts] == snapshot

    def test_document_named_like_a_format_is_counted_correctly(self) -> None:
        facts = [
            make_fact(subject="A", obj="1", category_id="c", format_tag="markdown", document="markdown"),
            make_fact(subject="B", obj="2", category_id="c", format_tag="markdown", document="other.md"),
            make_fact(subject="C", obj="3", category_id="c", format_tag="python", document="markdown"),
            make_fact(subject="D", obj="4", category_id="d", format_tag="markdown", document=None),
        ]

        assert ConnectionGraphBuilder().count_neighbors(facts) == count_neighbors_naive(facts)

    def test_indexed_outpaces_naive_on_a_single_format_corpus(self) -> None:
        categories = [f"category{index}" for index in range(19)]
        facts = [
            make_fact(
                subject=f"{categories[index % 19].capitalize()} System",
                obj=f"term{index}",
                category_id=categories[index % 19],
                format_tag="markdown",
                document=f"doc{index % 200}.md",
            )
            for index in range(4000)
        ]

        started = time.perf_counter()
        indexed = ConnectionGraphBuilder().count_neighbors(facts)
        indexed_seconds = time.perf_counter() - started

        started = time.perf_counter()
        naive = count_neighbors_naive(facts)
        naive_seconds = time.perf_counter() - started

        assert indexed == naive
        assert indexed_seconds < naive_seconds
