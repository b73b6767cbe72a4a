"""Tests for the category pattern catalog and its load-time validation."""

import json
from pathlib import Path

import pytest

from com_blockether_archaeology.knowledge.internal.CategoryPatternCatalog import (
    CategoryDefinition,
    CategoryPatternCatalog,
    compile_matcher,
)
from com_blockether_archaeology.knowledge.internal.KnowledgeArchaeologyErrors import (
    CatalogInvariantViolation,
    InvariantViolation,
)


class TestCompileMatcher:
    def test_matches_case_insensitively_on_word_boundaries(self) -> None:
        matcher = compile_matcher(["algorithm"])

        assert [m.group(0) for m in matcher.finditer("Algorithm, ALGORITHM and algorithmic")] == [
            "Algorithm",
            "ALGORITHM",
        ]

    def test_simple_pluralization(self) -> None:
        matcher = compile_matcher(["matrix", "vector"])

        assert [m.group(0) for m in matcher.finditer("vectors and matrixs")] == ["vectors", "matrixs"]

    def test_longer_terms_win(self) -> None:
        matcher = compile_matcher(["java", "javascript"])

        assert [m.group(0) for m in matcher.finditer("javascript and java")] == ["javascript", "java"]

    @pytest.mark.parametrize("text", ["data structure", "data_structure", "data-structure"])
    def test_multi_word_terms_accept_separators(self, text: str) -> None:
        matcher = compile_matcher(["data structure"])

        assert matcher.search(text) is not None

    def test_special_characters_are_literal(self) -> None:
        matcher = compile_matcher(["node.js", "ci/cd"])

        assert matcher.search("we use node.js with ci/cd") is not None
        assert matcher.search("nodexjs") is None


class TestCategoryPatternCatalog:
    def test_default_catalog_is_valid(self) -> None:
        catalog = CategoryPatternCatalog.default()

        assert len(catalog) == 19
        assert catalog["algebraicFoundations"].progression_rank == 1
        assert catalog["biology"].progression_rank == 7
        assert {c.id for c in catalog if c.externally_validated} == {"physics", "chemistry", "biology"}

    def test_default_labels(self) -> None:
        catalog = CategoryPatternCatalog.default()

        assert catalog["coreCS"].label == "CoreCS System"
        assert catalog["physics"].label == "Physics System"

    def test_declaration_order_is_kept(self) -> None:
        catalog = CategoryPatternCatalog(
            [
                {"id": "b", "terms": ["beta"]},
                {"id": "a", "terms": ["alpha"], "dependencies": ["b"]},
            ]
        )

        assert [c.id for c in catalog] == ["b", "a"]

    def test_dangling_dependency_fails_fast(self) -> None:
        with pytest.raises(CatalogInvariantViolation) as error:
            CategoryPatternCatalog([{"id": "coreCS", "terms": ["algorithm"], "dependencies": ["missing"]}])

        assert error.value.item_id == "coreCS"
        assert "missing" in str(error.value)

    def test_catalog_violation_is_an_invariant_violation(self) -> None:
        with pytest.raises(InvariantViolation):
            CategoryPatternCatalog([{"id": "x", "terms": ["x"], "dependencies": ["x"]}])

    def test_duplicate_ids_are_rejected(self) -> None:
        with pytest.raises(CatalogInvariantViolation):
            CategoryPatternCatalog([{"id": "x", "terms": ["a"]}, {"id": "x", "terms": ["b"]}])

    def test_category_without_terms_is_rejected(self) -> None:
        with pytest.raises(CatalogInvariantViolation):
            CategoryPatternCatalog([CategoryDefinition(id="empty")])

    def test_invalid_definition_is_rejected(self) -> None:
        with pytest.raises(CatalogInvariantViolation):
            CategoryPatternCatalog([{"id": "x", "terms": ["a"], "progression_rank": -1}])

    def test_terms_default_to_concepts(self) -> None:
        catalog = CategoryPatternCatalog([{"id": "x", "concepts": ["graph theory"]}])

        assert list(catalog["x"].find_lexemes("Graph Theory rocks")) == ["Graph Theory"]

    def test_from_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"categories": [{"id": "x", "terms": ["alpha"], "label": "X"}]}))

        catalog = CategoryPatternCatalog.from_json_file(path)

        assert catalog["x"].label == "X"
        assert "x" in catalog
        assert catalog.get("y") is None

    def test_from_json_file_with_dangling_dependency(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"id": "x", "terms": ["alpha"], "dependencies": ["nope"]}]))

        with pytest.raises(CatalogInvariantViolation):
            CategoryPatternCatalog.from_json_file(path)

    def test_unreadable_catalog_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogInvariantViolation):
            CategoryPatternCatalog.from_json_file(tmp_path / "absent.json")
