from __future__ import annotations

import functools
import hashlib
import itertools
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, computed_field

_WHITESPACE = re.compile(r"\s+")

# Fields owned by KnowledgeItem itself rather than by its payload.
RESERVED_ITEM_FIELDS = frozenset({"id", "kind", "origins"})


def normalize_component(text: str) -> str:
    """
    Normalize one triple component for identity purposes.

    Lowercases, collapses runs of whitespace to a single space and trims.

    Args:
        text: Raw subject, predicate or object

    Returns:
        Normalized text
    """
    return _WHITESPACE.sub(" ", str(text).lower()).strip()


def content_hash(subject: str, predicate: str, obj: str) -> str:
    """Stable identity of a triple, independent of the document that produced it."""
    key = "|".join(normalize_component(part) for part in (subject, predicate, obj))
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def canonical_json(value: Any) -> str:
    """Deterministic JSON with sorted keys, used for fallback hashing and tie-breaks."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Document(BaseModel):
    """A candidate document found by the corpus scanner."""

    path: Path = Field(description="Path of the document")
    size: int = Field(description="Size in bytes")
    modified: datetime = Field(description="Last modification time")
    extension: str = Field(description="Lowercase extension without the dot")
    format_tag: str = Field(description="Detected format, e.g. 'json', 'markdown', 'python'")
    language: str = Field(default="Unknown", description="Programming language, when the format is source code")

    @property
    def reference(self) -> str:
        """String form of the path used as origin reference in facts."""
        return str(self.path)


class ValidationRecord(BaseModel):
    """Corroborating concepts for one category, as supplied by a validation oracle."""

    category_id: str = Field(description="Category the record corroborates")
    concepts: List[str] = Field(default_factory=list, description="Corroborated concepts")
    relevance: float = Field(default=1.0, ge=0.0, le=1.0, description="Relevance weight of the record")
    query: str = Field(default="", description="Query that produced the record, if any")
    summary: str = Field(default="", description="Free text summary")


class Fact(BaseModel):
    """A (subject, predicate, object) triple with provenance and scoring metadata."""

    subject: str = Field(description="Subject, the category label for lexical facts")
    predicate: str = Field(description="Relation, e.g. 'implements' or 'contains'")
    object: str = Field(description="Object, e.g. the normalized matched lexeme")
    confidence: float = Field(default=0.0, ge=0.0, description="Extraction confidence")
    category_id: Optional[str] = Field(default=None, description="Category that produced the fact")
    document: Optional[str] = Field(default=None, description="Document that produced this occurrence")
    origins: List[str] = Field(default_factory=list, description="All origin references (documents, runs)")
    format_tag: str = Field(default="unknown", description="Format tag of the producing document")
    language: str = Field(default="Unknown", description="Programming language of the producing document")
    data_type: str = Field(default="lexical", description="'lexical', 'structured' or 'oracle'")
    validated: bool = Field(default=False, description="Corroborated by the validation oracle")
    externally_validated: bool = Field(default=False, description="Category is externally validated")
    progression_rank: int = Field(default=0, description="Rank of the category in its refinement chain")
    dependencies: List[str] = Field(default_factory=list, description="Dependency ids of the category")
    fitness: float = Field(default=0.0, ge=0.0, description="Current fitness")
    connections: Optional[int] = Field(default=None, description="Neighbor count from the last selection")
    generation: int = Field(default=0, description="Selection generations survived")
    timestamp: Optional[str] = Field(default=None, description="ISO timestamp of the producing document")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        return content_hash(self.subject, self.predicate, self.object)


class KnowledgeItem(BaseModel):
    """Flat, kind-tagged record the merger deduplicates."""

    id: str = Field(description="Content hash of the item")
    kind: str = Field(description="Item kind, e.g. 'triple', 'pattern', 'axiom'")
    origins: List[str] = Field(default_factory=list, description="Sorted, unique origin references")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Payload of the item")

    @classmethod
    def from_fact(cls, fact: Fact) -> "KnowledgeItem":
        payload = fact.model_dump(exclude={"id", "origins"})
        origins = set(fact.origins)
        if fact.document:
            origins.add(fact.document)
        return cls(id=fact.id, kind="triple", origins=sorted(origins), fields=payload)

    def to_fact(self) -> Fact:
        return Fact.model_validate({**self.fields, "origins": list(self.origins)})

    def to_record(self) -> Dict[str, Any]:
        """Flat dict form used in persisted knowledge bases."""
        return {**self.fields, "id": self.id, "kind": self.kind, "origins": list(self.origins)}


class FailureCounts(BaseModel):
    """Recovered failures, surfaced in output metadata."""

    unreadable_documents: int = Field(default=0, ge=0)
    malformed_structured_documents: int = Field(default=0, ge=0)
    corrupt_collections: int = Field(default=0, ge=0)
    merge_conflicts: int = Field(default=0, ge=0)

    def combine(self, other: "FailureCounts") -> "FailureCounts":
        return FailureCounts(
            unreadable_documents=self.unreadable_documents + other.unreadable_documents,
            malformed_structured_documents=self.malformed_structured_documents
            + other.malformed_structured_documents,
            corrupt_collections=self.corrupt_collections + other.corrupt_collections,
            merge_conflicts=self.merge_conflicts + other.merge_conflicts,
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        return (
            self.unreadable_documents
            + self.malformed_structured_documents
            + self.corrupt_collections
            + self.merge_conflicts
        )


class CorpusScan(BaseModel):
    """Output of a scan pass."""

    root: Path = Field(description="Scanned root directory")
    documents: List[Document] = Field(default_factory=list, description="Candidate documents sorted by path")
    skipped_paths: List[str] = Field(default_factory=list, description="Paths that could not be inspected")
    out_of_bounds: int = Field(default=0, description="Files skipped for their size")


class ExtractionAccumulator(BaseModel):
    """
    Value threaded through the extraction stage.

    Each document produces its own accumulator; accumulators are combined
    with `combine`, which is associative, so partial results from parallel
    workers can be folded in any grouping.
    """

    facts: List[Fact] = Field(default_factory=list)
    documents_processed: int = Field(default=0)
    failures: FailureCounts = Field(default_factory=FailureCounts)

    def combine(self, other: "ExtractionAccumulator") -> "ExtractionAccumulator":
        return ExtractionAccumulator(
            facts=[*self.facts, *other.facts],
            documents_processed=self.documents_processed + other.documents_processed,
            failures=self.failures.combine(other.failures),
        )

    @classmethod
    def combine_all(cls, accumulators: Iterable["ExtractionAccumulator"]) -> "ExtractionAccumulator":
        """Fold many accumulators at once; facts are concatenated a single time."""
        parts = list(accumulators)
        return cls(
            facts=list(itertools.chain.from_iterable(part.facts for part in parts)),
            documents_processed=sum(part.documents_processed for part in parts),
            failures=functools.reduce(FailureCounts.combine, (part.failures for part in parts), FailureCounts()),
        )


class CollectionSummary(BaseModel):
    added: int = Field(default=0, description="Items inserted because their hash was unseen")
    merged: int = Field(default=0, description="Items combined with an existing record")
    conflicts: int = Field(default=0, description="Items dropped in favor of an incompatible first-seen record")


class MergeSummary(BaseModel):
    """Summary counts of a merge."""

    collections: Dict[str, CollectionSummary] = Field(default_factory=dict, description="Per-kind counts")
    sources: List[str] = Field(default_factory=list, description="Consumed source identifiers")
    skipped_sources: List[str] = Field(default_factory=list, description="Sources skipped as corrupt")
    coherence: float = Field(default=0.0, description="Aggregate coherence of the merged items")
    failures: FailureCounts = Field(default_factory=FailureCounts)


class CategoryStatistics(BaseModel):
    category_id: str
    count: int = 0
    total_fitness: float = 0.0
    average_fitness: float = 0.0
    validated: int = 0
    externally_validated: int = 0
    validation_ratio: float = 0.0
    external_validation_ratio: float = 0.0
    progression_rank: int = 0


class FormatStatistics(BaseModel):
    format_tag: str
    count: int = 0
    total_fitness: float = 0.0
    average_fitness: float = 0.0
    validated: int = 0
    validation_ratio: float = 0.0


class ProgressionChain(BaseModel):
    """Link between two adjacent progression ranks that both have survivors."""

    from_rank: int
    to_rank: int
    from_count: int
    to_count: int
    strength: int
    chain_type: str = Field(description="'mathematical' up to rank 4, 'scientific' above")


class CrossReference(BaseModel):
    """A corroborated concept found in more than one document."""

    concept: str
    documents: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    strength: int = 0
    average_fitness: float = 0.0
    cross_category: bool = False


class AggregateStatistics(BaseModel):
    """Read-only summary of a fact population."""

    total_facts: int = 0
    mean_fitness: float = 0.0
    overall_coherence: float = 0.0
    validation_ratio: float = 0.0
    external_validation_ratio: float = 0.0
    categories: Dict[str, CategoryStatistics] = Field(default_factory=dict)
    formats: Dict[str, FormatStatistics] = Field(default_factory=dict)
    ranking: List[str] = Field(
        default_factory=list,
        description="Category ids by descending average fitness, ties in first-seen order",
    )
    progression_chains: List[ProgressionChain] = Field(default_factory=list)
    cross_references: List[CrossReference] = Field(default_factory=list)


class KnowledgeBaseMetadata(BaseModel):
    source_id: str = Field(description="Identifier of the run that produced this knowledge base")
    generated_at: str = Field(default_factory=utc_now_iso, description="ISO generation timestamp")
    sources: List[str] = Field(default_factory=list, description="Consumed source identifiers")
    item_counts: Dict[str, int] = Field(default_factory=dict, description="Items per collection")
    documents_scanned: int = 0
    documents_processed: int = 0
    raw_facts: int = 0
    surviving_facts: int = 0
    generations: int = 0
    validation_ratio: float = 0.0
    external_validation_ratio: float = 0.0
    coherence: float = 0.0
    merge: Dict[str, CollectionSummary] = Field(default_factory=dict)
    failures: FailureCounts = Field(default_factory=FailureCounts)


# kind -> collection key in persisted documents
COLLECTION_KEYS: Dict[str, str] = {
    "triple": "triples",
    "axiom": "axioms",
    "pattern": "patterns",
    "enhanced_pattern": "enhanced_patterns",
    "web_knowledge": "web_knowledge",
    "math_chain": "mathematical_chains",
    "science_validation": "science_validations",
    "cross_reference": "cross_references",
    "harmonic_signature": "harmonic_signatures",
}


class KnowledgeBase(BaseModel):
    """Deduplicated, filtered knowledge with aggregate statistics."""

    metadata: KnowledgeBaseMetadata
    collections: Dict[str, List[KnowledgeItem]] = Field(
        default_factory=dict,
        description="Items per kind, sorted by id",
    )
    statistics: AggregateStatistics = Field(default_factory=AggregateStatistics)

    @property
    def facts(self) -> List[Fact]:
        return [item.to_fact() for item in self.collections.get("triple", [])]

    def to_document(self) -> Dict[str, Any]:
        """Self-describing JSON document; readable again by the merger."""
        document: Dict[str, Any] = {"metadata": self.metadata.model_dump(mode="json")}
        for kind, items in self.collections.items():
            key = COLLECTION_KEYS.get(kind, kind)
            document[key] = [item.to_record() for item in items]
        document["statistics"] = self.statistics.model_dump(mode="json")
        return document

    def to_json_file(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_document(), indent=2, default=str), encoding="utf-8")
        return path

    @classmethod
    def from_json_file(cls, path: Path) -> "KnowledgeBase":
        """Read a knowledge base written by `to_json_file`."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        collections: Dict[str, List[KnowledgeItem]] = {}
        for kind, key in COLLECTION_KEYS.items():
            if key not in data:
                continue
            collections[kind] = [
                KnowledgeItem(
                    id=record["id"],
                    kind=kind,
                    origins=record.get("origins", []),
                    fields={name: value for name, value in record.items() if name not in RESERVED_ITEM_FIELDS},
                )
                for record in data[key]
            ]
        return cls(
            metadata=KnowledgeBaseMetadata.model_validate(data["metadata"]),
            collections=collections,
            statistics=AggregateStatistics.model_validate(data.get("statistics", {})),
        )
