"""
Cross-source deduplication and merging of knowledge collections.

Items are keyed by kind and content hash. Two items with the same key merge
into one record:

- quality fields (confidence, fitness, ...) keep their maximum
- origins are the sorted union of both origin lists
- every other field, freshness fields included, comes from the item with
  the latest freshness values, ties broken by canonical payload

Each rule is associative and commutative, so any processing order of the
same inputs produces the same knowledge base. Merge output lists are sorted
by id.
"""

import functools
import logging
import numbers
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .internal.KnowledgeArchaeologyErrors import CorruptKnowledgeCollection, InvariantViolation
from .internal.KnowledgeArchaeologySettings import MergeSettings
from .internal.KnowledgeArchaeologyTypes import (
    CollectionSummary,
    FailureCounts,
    KnowledgeBase,
    KnowledgeItem,
    MergeSummary,
    canonical_json,
)
from .internal.KnowledgeCollectionNormalizer import (
    KnowledgeCollectionNormalizer,
    KnowledgeSource,
    normalize_sources,
)

logger = logging.getLogger(__name__)

KnowledgeCollections = Dict[str, List[KnowledgeItem]]


class MergeResult(BaseModel):
    collections: KnowledgeCollections = Field(default_factory=dict, description="Merged items per kind, by id")
    summary: MergeSummary = Field(default_factory=MergeSummary)


class KnowledgeMergeCore:
    """Content-addressed merger for knowledge collections from independent runs."""

    def __init__(self, settings: Optional[MergeSettings] = None):
        self._settings = settings or MergeSettings()
        self._normalizer = KnowledgeCollectionNormalizer(self._settings)

    @property
    def normalizer(self) -> KnowledgeCollectionNormalizer:
        return self._normalizer

    def _winner_key(self, item: KnowledgeItem) -> Tuple[Tuple[str, ...], str]:
        freshness = tuple(str(item.fields.get(name) or "") for name in self._settings.freshness_fields)
        payload = {key: value for key, value in item.fields.items() if key not in self._settings.quality_fields}
        return freshness, canonical_json(payload)

    def check_compatible(self, existing: KnowledgeItem, incoming: KnowledgeItem) -> None:
        """
        Raises:
            InvariantViolation: If two items share an id but not their identity payload
        """
        if self._normalizer.identity(existing.fields) != self._normalizer.identity(incoming.fields):
            raise InvariantViolation("hash collision between incompatible payloads", item_id=existing.id)

    def merge_items(self, existing: KnowledgeItem, incoming: KnowledgeItem) -> KnowledgeItem:
        """Combine two compatible items with the same id into one record."""
        winner = max(existing, incoming, key=self._winner_key)
        fields: Dict[str, Any] = {
            key: value for key, value in winner.fields.items() if key not in self._settings.quality_fields
        }
        for name in self._settings.quality_fields:
            values = [
                item.fields[name]
                for item in (existing, incoming)
                if isinstance(item.fields.get(name), numbers.Real) and not isinstance(item.fields.get(name), bool)
            ]
            if values:
                fields[name] = max(values)
        return KnowledgeItem(
            id=existing.id,
            kind=existing.kind,
            origins=sorted(set(existing.origins) | set(incoming.origins)),
            fields=fields,
        )

    def combine(
        self,
        left: KnowledgeCollections,
        right: KnowledgeCollections,
        failures: Optional[FailureCounts] = None,
        summaries: Optional[Dict[str, CollectionSummary]] = None,
    ) -> KnowledgeCollections:
        """
        Merge two collection maps into a new one; neither input is modified.

        Conflicting items keep the first-seen (left) record. When `failures`
        is given, conflicts are counted on it. When `summaries` is given, every
        right-hand item is counted there per kind as added, merged or conflicting.
        """
        merged: Dict[str, Dict[str, KnowledgeItem]] = {
            kind: {item.id: item for item in items} for kind, items in left.items()
        }
        for kind, items in right.items():
            bucket = merged.setdefault(kind, {})
            summary = summaries.setdefault(kind, CollectionSummary()) if summaries is not None else CollectionSummary()
            for item in items:
                existing = bucket.get(item.id)
                if existing is None:
                    bucket[item.id] = item
                    summary.added += 1
                    continue
                try:
                    self.check_compatible(existing, item)
                except InvariantViolation as e:
                    logger.warning(f"Keeping first-seen item: {e}")
                    summary.conflicts += 1
                    if failures is not None:
                        failures.merge_conflicts += 1
                    continue
                bucket[item.id] = self.merge_items(existing, item)
                summary.merged += 1

        return {kind: [bucket[item_id] for item_id in sorted(bucket)] for kind, bucket in sorted(merged.items())}

    @staticmethod
    def group_by_kind(items: Iterable[KnowledgeItem]) -> KnowledgeCollections:
        """Group items by kind without merging duplicates."""
        groups: KnowledgeCollections = {}
        for item in items:
            groups.setdefault(item.kind, []).append(item)
        return groups

    def merge(self, inputs: Sequence[Tuple[str, Sequence[KnowledgeItem]]]) -> MergeResult:
        """
        Merge item lists from several sources.

        Each source's items are first merged among themselves, so a source that
        repeats an item counts it as merged, not added.

        Args:
            inputs: (source id, items) pairs

        Returns:
            Merged collections and summary counts
        """
        failures = FailureCounts()
        summaries: Dict[str, CollectionSummary] = {}
        collections = functools.reduce(
            lambda acc, items: self.combine(acc, self.group_by_kind(items), failures, summaries),
            (items for _, items in inputs),
            {},
        )
        summary = MergeSummary(
            collections=dict(sorted(summaries.items())),
            sources=[source_id for source_id, _ in inputs],
            coherence=self.coherence(collections),
            failures=failures,
        )
        logger.info(
            f"Merged {sum(s.added + s.merged + s.conflicts for s in summaries.values())} items from {len(inputs)} sources "
            f"into {sum(len(items) for items in collections.values())} unique items"
        )
        return MergeResult(collections=collections, summary=summary)

    def merge_sources(
        self,
        sources: Sequence[KnowledgeSource],
        fresh: Sequence[Tuple[str, Sequence[KnowledgeItem]]] = (),
    ) -> MergeResult:
        """
        Normalize and merge raw sources, skipping and counting corrupt ones.

        Args:
            sources: Parsed knowledge collections
            fresh: Already normalized (source id, items) pairs merged ahead of the sources
        """
        normalized, skipped = normalize_sources(self._normalizer, sources)
        result = self.merge([*fresh, *normalized])
        result.summary.skipped_sources = skipped
        result.summary.failures.corrupt_collections += len(skipped)
        return result

    def merge_files(
        self,
        paths: Sequence[Path],
        fresh: Sequence[Tuple[str, Sequence[KnowledgeItem]]] = (),
    ) -> MergeResult:
        """Load, normalize and merge knowledge collection files."""
        sources: List[KnowledgeSource] = []
        unreadable: List[str] = []
        for path in paths:
            try:
                sources.append(KnowledgeSource.from_json_file(path))
            except CorruptKnowledgeCollection as e:
                logger.warning(f"Skipping {e}")
                unreadable.append(str(path))
        result = self.merge_sources(sources, fresh)
        result.summary.skipped_sources = unreadable + result.summary.skipped_sources
        result.summary.failures.corrupt_collections += len(unreadable)
        return result

    def merge_knowledge_bases(self, bases: Sequence[KnowledgeBase]) -> MergeResult:
        """Merge in-memory knowledge bases through their persisted form."""
        sources = [KnowledgeSource(source_id=base.metadata.source_id, data=base.to_document()) for base in bases]
        return self.merge_sources(sources)

    def coherence(self, collections: KnowledgeCollections) -> float:
        """
        Mean quality of all items, scaled and capped at 1.0.

        An item's quality is its fitness when present, else its confidence;
        items with neither are ignored.
        """
        qualities: List[float] = []
        for items in collections.values():
            for item in items:
                for name in ("fitness", "confidence"):
                    value = item.fields.get(name)
                    if isinstance(value, numbers.Real) and not isinstance(value, bool):
                        qualities.append(float(value))
                        break
        if not qualities:
            return 0.0
        return min(1.0, sum(qualities) / len(qualities) * self._settings.coherence_scale)
