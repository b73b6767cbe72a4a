"""Tests for the validation oracle and lexeme corroboration."""

import json
from pathlib import Path

import pytest

from com_blockether_archaeology.knowledge.internal.KnowledgeArchaeologyTypes import ValidationRecord
from com_blockether_archaeology.knowledge.internal.ValidationOracle import (
    StaticValidationOracle,
    ValidationOracle,
    is_corroborated,
)


class TestStaticValidationOracle:
    def test_default_table_is_keyed_by_category(self) -> None:
        oracle = StaticValidationOracle.default()

        physics = oracle.lookup("physics")
        assert len(physics) == 2
        assert all(record.category_id == "physics" for record in physics)
        assert oracle.lookup("webTech") == ()

    def test_satisfies_protocol(self) -> None:
        assert isinstance(StaticValidationOracle(), ValidationOracle)

    def test_lookup_is_pure(self) -> None:
        oracle = StaticValidationOracle.default()

        assert oracle.lookup("biology") == oracle.lookup("biology")

    def test_from_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "oracle.json"
        path.write_text(json.dumps([{"category_id": "x", "concepts": ["alpha beta"], "relevance": 0.5}]))

        oracle = StaticValidationOracle.from_json_file(path)

        assert oracle.lookup("x")[0].concepts == ["alpha beta"]
        assert len(oracle.records) == 1


class TestIsCorroborated:
    RECORDS = [ValidationRecord(category_id="biology", concepts=["evolutionary algorithms", "DNA sequencing"])]

    @pytest.mark.parametrize(
        "lexeme, expected",
        [
            ("algorithm", True),  # lexeme inside a concept
            ("DNA", True),  # case-insensitive
            ("dna sequencing pipelines", True),  # concept inside the lexeme
            ("protein", False),
            ("", False),
        ],
    )
    def test_containment_at_default_threshold(self, lexeme: str, expected: bool) -> None:
        assert is_corroborated(lexeme, self.RECORDS) is expected

    def test_no_records_means_not_corroborated(self) -> None:
        assert is_corroborated("algorithm", []) is False

    def test_lower_threshold_accepts_near_matches(self) -> None:
        assert is_corroborated("algoritm", self.RECORDS) is False
        assert is_corroborated("algoritm", self.RECORDS, threshold=80.0) is True
