"""Tests for normalization of legacy, trie and manuscript knowledge collections."""

import json
from pathlib import Path
from typing import Any

import pytest

from com_blockether_archaeology.knowledge.internal.KnowledgeArchaeologyErrors import CorruptKnowledgeCollection
from com_blockether_archaeology.knowledge.internal.KnowledgeArchaeologyTypes import content_hash, text_hash
from com_blockether_archaeology.knowledge.internal.KnowledgeCollectionNormalizer import (
    KnowledgeCollectionNormalizer,
    KnowledgeSource,
    normalize_sources,
    to_snake_case,
)


def triple(subject: str, obj: str, **extra: Any) -> dict:
    return {"subject": subject, "predicate": "implements", "object": obj, **extra}


@pytest.fixture
def normalizer() -> KnowledgeCollectionNormalizer:
    return KnowledgeCollectionNormalizer()


class TestFlatCollections:
    def test_legacy_camel_case_record(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        source = KnowledgeSource(
            source_id="run-1",
            data={
                "topTriples": [
                    triple(
                        "Physics System",
                        "quantum",
                        survivalFitness=1.2,
                        csCategory="physics",
                        sourceFile="a.md",
                        fileType="markdown",
                        revolutionaryValue=3,
                    )
                ]
            },
        )

        (item,) = normalizer.normalize(source)

        assert item.kind == "triple"
        assert item.id == content_hash("Physics System", "implements", "quantum")
        assert item.origins == ["a.md", "run-1"]
        assert item.fields["fitness"] == 1.2
        assert item.fields["category_id"] == "physics"
        assert item.fields["format_tag"] == "markdown"
        assert item.fields["revolutionary_value"] == 3
        assert item.fields["document"] == "a.md"
        assert item.to_fact().fitness == 1.2

    def test_every_recognized_collection_is_read(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        source = KnowledgeSource(
            source_id="run-1",
            data={
                "triples": [triple("A", "b")],
                "axioms": [{"axiom": "Everything connects"}],
                "revolutionaryPatterns": [{"pattern": "Golden ratio", "confidence": 0.8}],
                "webKnowledge": [{"query": "graph theory"}],
                "extractedKnowledge": {"triples": [triple("C", "d")]},
            },
        )

        items = normalizer.normalize(source)

        assert sorted(item.kind for item in items) == ["axiom", "pattern", "triple", "triple", "web_knowledge"]

    @pytest.mark.parametrize("key", ["harmonic_signatures", "harmonicSignatures"])
    def test_harmonic_signatures_are_read(self, normalizer: KnowledgeCollectionNormalizer, key: str) -> None:
        source = KnowledgeSource(source_id="run-1", data={key: [{"signature": "fibonacci", "frequency": 1.618}]})

        (item,) = normalizer.normalize(source)

        assert item.kind == "harmonic_signature"
        assert item.fields["signature"] == "fibonacci"

    def test_metadata_only_document_is_empty_not_corrupt(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        assert normalizer.normalize(KnowledgeSource(source_id="x", data={"metadata": {}})) == []

    def test_non_numeric_quality_fields_are_dropped(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        item = normalizer.normalize_record({"pattern": "p", "confidence": "high", "fitness": True}, "pattern")

        assert "confidence" not in item.fields
        assert "fitness" not in item.fields

    def test_freshness_fields_are_strings(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        item = normalizer.normalize_record({"pattern": "p", "timestamp": 1700000000}, "pattern")

        assert item.fields["timestamp"] == "1700000000"

    def test_reserved_fields_are_not_payload(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        item = normalizer.normalize_record({"pattern": "p", "id": "bogus", "kind": "axiom"}, "pattern")

        assert "id" not in item.fields
        assert "kind" not in item.fields
        assert item.kind == "pattern"
        assert item.id == text_hash("pattern:p")

    @pytest.mark.parametrize(
        "name, expected",
        [("survivalFitness", "survival_fitness"), ("field", "field"), ("ABC", "abc"), ("already_snake", "already_snake")],
    )
    def test_to_snake_case(self, name: str, expected: str) -> None:
        assert to_snake_case(name) == expected


class TestTrieAndManuscript:
    def test_trie_nodes_are_flattened_depth_first(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        data = {
            "root": {
                "children": {
                    "b": {"triples": [triple("B", "two")]},
                    "a": {"children": {"x": {"triples": [triple("A", "one")]}}},
                }
            }
        }

        items = normalizer.normalize(KnowledgeSource(source_id="trie", data=data))

        assert [item.fields["subject"] for item in items] == ["A", "B"]
        assert all(item.kind == "triple" for item in items)

    def test_manuscript_sections_become_patterns(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        data = {"sections": [{"title": "Introduction", "content": "x" * 600}]}

        (item,) = normalizer.normalize(KnowledgeSource(source_id="book", data=data))

        assert item.kind == "pattern"
        assert item.id == text_hash("pattern:introduction")
        assert len(item.fields["content"]) == 500
        assert item.fields["confidence"] == pytest.approx(0.9)
        assert item.fields["type"] == "manuscript_section"
        assert item.origins == ["book"]


class TestCorruptCollections:
    @pytest.mark.parametrize(
        "data",
        [
            [triple("A", "b")],
            "not a collection",
            {"unrelated": 1},
            {"triples": {"subject": "A"}},
            {"triples": [1, 2]},
            {"root": {"children": [5]}},
            {"sections": "text"},
        ],
        ids=["list", "string", "unrecognized", "mapping-collection", "scalar-items", "bad-trie", "bad-sections"],
    )
    def test_corrupt_shapes_raise(self, normalizer: KnowledgeCollectionNormalizer, data: Any) -> None:
        with pytest.raises(CorruptKnowledgeCollection) as exc_info:
            normalizer.normalize(KnowledgeSource(source_id="broken", data=data))

        assert exc_info.value.source == "broken"

    def test_normalize_sources_skips_corrupt(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        sources = [
            KnowledgeSource(source_id="good", data={"triples": [triple("A", "b")]}),
            KnowledgeSource(source_id="bad", data={"nothing": []}),
        ]

        normalized, skipped = normalize_sources(normalizer, sources)

        assert [source_id for source_id, _ in normalized] == ["good"]
        assert skipped == ["bad"]


class TestIdentity:
    def test_triple_hash_ignores_case_and_whitespace(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        left = normalizer.normalize_record(triple("  Physics   System ", "Quantum"), "triple")
        right = normalizer.normalize_record(
            {"subject": "physics system", "predicate": "IMPLEMENTS", "object": "quantum"}, "triple"
        )

        assert left.id == right.id

    def test_triple_hash_ignores_provenance_and_scores(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        left = normalizer.normalize_record(triple("A", "b", fitness=0.3, sourceFile="x.md"), "triple", "run-1")
        right = normalizer.normalize_record(triple("A", "b", fitness=0.9, sourceFile="y.md"), "triple", "run-2")

        assert left.id == right.id

    def test_natural_key_order(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        item = normalizer.normalize_record({"title": "Later", "pattern": "First"}, "pattern")

        assert normalizer.identity(item.fields) == "pattern:first"

    def test_fallback_identity_excludes_managed_fields(self, normalizer: KnowledgeCollectionNormalizer) -> None:
        left = normalizer.normalize_record({"weight": 1, "confidence": 0.5, "timestamp": "a"}, "math_chain")
        right = normalizer.normalize_record({"weight": 1, "confidence": 0.9, "timestamp": "b"}, "math_chain")
        other = normalizer.normalize_record({"weight": 2}, "math_chain")

        assert left.id == right.id
        assert left.id != other.id


class TestKnowledgeSource:
    def test_source_id_from_metadata(self, tmp_path: Path) -> None:
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({"metadata": {"source_id": "run-7"}, "triples": []}))

        assert KnowledgeSource.from_json_file(path).source_id == "run-7"

    def test_source_id_defaults_to_path(self, tmp_path: Path) -> None:
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({"triples": []}))

        assert KnowledgeSource.from_json_file(path).source_id == str(path)

    @pytest.mark.parametrize("content", [None, "{not json"])
    def test_unreadable_files_are_corrupt(self, tmp_path: Path, content: Any) -> None:
        path = tmp_path / "kb.json"
        if content is not None:
            path.write_text(content)

        with pytest.raises(CorruptKnowledgeCollection):
            KnowledgeSource.from_json_file(path)
