"""
Knowledge archaeology pipeline.

Stage order: discovery -> extraction -> graph build + survival filter ->
merge with prior knowledge bases -> aggregate statistics. No stage starts
before the previous one has produced its full output.
"""

import functools
import json
import logging
import time
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar, cast

import anyio
from pydantic import ValidationError

from ..utils.BatchProcessor import BatchProcessor
from .internal.AggregateStatisticsComputer import AggregateStatisticsComputer
from .internal.CategoryPatternCatalog import CategoryPatternCatalog
from .internal.ConnectionGraphBuilder import ConnectionGraphBuilder
from .internal.FileCorpusScanner import FileCorpusScanner
from .internal.KnowledgeArchaeologySettings import ArchaeologySettings
from .internal.KnowledgeArchaeologyTypes import (
    COLLECTION_KEYS,
    AggregateStatistics,
    CorpusScan,
    Document,
    ExtractionAccumulator,
    Fact,
    FailureCounts,
    KnowledgeBase,
    KnowledgeBaseMetadata,
    KnowledgeItem,
)
from .internal.SurvivalFilter import FitnessScorer, SurvivalFilter, SurvivalOutcome
from .internal.TripleExtractor import TripleExtractor
from .internal.ValidationOracle import StaticValidationOracle, ValidationOracle
from .KnowledgeMergeCore import KnowledgeMergeCore, MergeResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def timed_operation(step_name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to time operations and log their duration.

    Args:
        step_name: Name of the operation for logging

    Returns:
        Decorated function that logs execution time
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            start_time = time.time()
            logger.info(f"{step_name}: Starting...")
            result = func(*args, **kwargs)
            elapsed = time.time() - start_time
            logger.info(f"{step_name}: Completed in {elapsed:.2f}s")
            return result

        return wrapper

    return decorator


def async_timed_operation(
    step_name: str,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to time async operations and log their duration.

    Args:
        step_name: Name of the operation for logging

    Returns:
        Decorated async function that logs execution time
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start_time = time.time()
            logger.info(f"{step_name}: Starting...")
            result = await func(*args, **kwargs)  # type: ignore
            elapsed = time.time() - start_time
            logger.info(f"{step_name}: Completed in {elapsed:.2f}s")
            return cast(T, result)

        return wrapper  # type: ignore

    return decorator


class KnowledgeArchaeologyCore:
    """Core knowledge archaeology system"""

    def __init__(
        self,
        settings: Optional[ArchaeologySettings] = None,
        catalog: Optional[CategoryPatternCatalog] = None,
        oracle: Optional[ValidationOracle] = None,
    ):
        """
        Build the pipeline. The catalog is validated here, so a bad catalog
        fails before any document is scanned.

        Args:
            settings: Pipeline settings, defaults when omitted
            catalog: Category catalog; loaded from settings.catalog_path or the built-in one when omitted
            oracle: Validation oracle; the built-in static table when omitted

        Raises:
            CatalogInvariantViolation: If the catalog is invalid
        """
        self._settings = settings or ArchaeologySettings()
        if catalog is None:
            if self._settings.catalog_path is not None:
                catalog = CategoryPatternCatalog.from_json_file(self._settings.catalog_path)
            else:
                catalog = CategoryPatternCatalog.default()
        self._catalog = catalog
        self._oracle = oracle if oracle is not None else StaticValidationOracle.default()

        self._scanner = FileCorpusScanner(self._settings.scanner)
        self._extractor = TripleExtractor(self._catalog, self._oracle, self._settings.extraction)
        self._survival = SurvivalFilter(
            FitnessScorer(self._settings.scoring),
            self._settings.survival,
            ConnectionGraphBuilder(),
        )
        self._merger = KnowledgeMergeCore(self._settings.merge)
        self._statistics = AggregateStatisticsComputer(self._settings.statistics)
        self._output_dir = self._settings.output_dir
        if self._output_dir is not None:
            self._output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"KnowledgeArchaeologyCore initialized with {len(self._catalog)} categories, "
            f"source_id={self._settings.source_id}"
        )

    @property
    def settings(self) -> ArchaeologySettings:
        return self._settings

    @property
    def catalog(self) -> CategoryPatternCatalog:
        return self._catalog

    @timed_operation("Scanning corpus")
    def scan(self, root: Path) -> CorpusScan:
        return self._scanner.scan(root)

    def _extract_document(self, document: Document) -> ExtractionAccumulator:
        return self._extractor.extract(document, self._scanner.read(document))

    @async_timed_operation("Extracting facts")
    async def extract(self, scan: CorpusScan) -> ExtractionAccumulator:
        """
        Extract facts from every scanned document, one worker per document.

        Workers return independent accumulators that are folded in scan
        order. Documents that cannot be read, after retrying transient OS
        errors, are counted as unreadable.
        """
        processor: BatchProcessor[Document, ExtractionAccumulator] = BatchProcessor(
            batch_size=self._settings.extraction.max_concurrent_documents,
            max_retries=self._settings.extraction.read_retries,
            retry_exceptions=(OSError,),
        )

        async def extract_one(document: Document) -> ExtractionAccumulator:
            return await anyio.to_thread.run_sync(self._extract_document, document)

        outcome = await processor.process_collecting_failures(
            scan.documents, extract_one, describe=lambda document: document.reference
        )

        unreadable = ExtractionAccumulator(
            failures=FailureCounts(unreadable_documents=len(outcome.failures) + len(scan.skipped_paths))
        )
        accumulator = ExtractionAccumulator.combine_all([unreadable, *outcome.results])

        if self._settings.extraction.emit_oracle_facts:
            accumulator = ExtractionAccumulator(facts=self._extractor.oracle_facts()).combine(accumulator)

        logger.info(
            f"Extracted {len(accumulator.facts)} raw facts from {accumulator.documents_processed} documents "
            f"({accumulator.failures.unreadable_documents} unreadable, "
            f"{accumulator.failures.malformed_structured_documents} malformed)"
        )
        return accumulator

    @timed_operation("Survival filtering")
    def select(self, facts: Sequence[Fact]) -> SurvivalOutcome:
        return self._survival.apply(facts)

    def _to_items(self, facts: Sequence[Fact]) -> List[KnowledgeItem]:
        items = []
        for fact in facts:
            item = KnowledgeItem.from_fact(fact)
            items.append(item.model_copy(update={"origins": sorted({*item.origins, self._settings.source_id})}))
        return items

    @timed_operation("Merging knowledge")
    def merge(self, facts: Sequence[Fact], prior: Sequence[Path] = ()) -> MergeResult:
        """Merge surviving facts of this run with previously persisted knowledge collections."""
        fresh = [(self._settings.source_id, self._to_items(facts))]
        return self._merger.merge_files(prior, fresh)

    @timed_operation("Computing statistics")
    def summarize(self, facts: Sequence[Fact]) -> AggregateStatistics:
        return self._statistics.compute(facts)

    @staticmethod
    def _facts_from_items(items: Sequence[KnowledgeItem]) -> List[Fact]:
        facts = []
        for item in items:
            try:
                facts.append(item.to_fact())
            except ValidationError as e:
                logger.debug(f"Item {item.id} is not a well-formed fact, excluded from statistics: {e}")
        return facts

    @async_timed_operation("Knowledge excavation")
    async def excavate(self, root: Path, prior: Sequence[Path] = ()) -> KnowledgeBase:
        """
        Run the full pipeline over a directory tree.

        Args:
            root: Corpus root directory
            prior: Previously persisted knowledge collections to merge with

        Returns:
            The merged, filtered knowledge base with statistics. The run always
            completes; recovered failures are counted in its metadata.
        """
        scan = await anyio.to_thread.run_sync(self.scan, Path(root))
        self._persist(
            "1_scan",
            {
                "timestamp": datetime.now().isoformat(),
                "scan": scan.model_dump(mode="json"),
            },
        )

        accumulator = await self.extract(scan)
        self._persist(
            "2_raw_facts",
            {
                "timestamp": datetime.now().isoformat(),
                "facts": [fact.model_dump(mode="json") for fact in accumulator.facts],
                "failures": accumulator.failures.model_dump(mode="json"),
            },
        )

        outcome = self.select(accumulator.facts)
        self._persist(
            "3_survivors",
            {
                "timestamp": datetime.now().isoformat(),
                "generations": outcome.generations,
                "survivors": [fact.model_dump(mode="json") for fact in outcome.survivors],
                "discarded": len(outcome.discarded),
            },
        )

        merged = self.merge(outcome.survivors, prior)
        collections = dict(merged.collections)
        collections.setdefault("triple", [])
        facts = self._facts_from_items(collections["triple"])
        statistics = self.summarize(facts)

        failures = accumulator.failures.combine(merged.summary.failures)
        metadata = KnowledgeBaseMetadata(
            source_id=self._settings.source_id,
            sources=merged.summary.sources,
            item_counts={COLLECTION_KEYS.get(kind, kind): len(items) for kind, items in collections.items()},
            documents_scanned=len(scan.documents),
            documents_processed=accumulator.documents_processed,
            raw_facts=len(accumulator.facts),
            surviving_facts=len(outcome.survivors),
            generations=outcome.generations,
            validation_ratio=statistics.validation_ratio,
            external_validation_ratio=statistics.external_validation_ratio,
            coherence=merged.summary.coherence,
            merge=merged.summary.collections,
            failures=failures,
        )
        knowledge_base = KnowledgeBase(metadata=metadata, collections=collections, statistics=statistics)
        self._persist("4_knowledge_base", knowledge_base.to_document())

        if failures.total:
            logger.warning(f"Excavation completed with recovered failures: {failures.model_dump()}")
        return knowledge_base

    def run(self, root: Path, prior: Sequence[Path] = ()) -> KnowledgeBase:
        """Synchronous entry point for `excavate`."""
        return anyio.run(functools.partial(self.excavate, root, prior))

    def _persist(self, subname: str, results: Dict[str, Any]) -> Optional[Path]:
        """
        Save a stage snapshot to a JSON file in the output directory.

        Args:
            subname: Prefix for the filename
            results: Snapshot contents

        Returns:
            Path to saved JSON file, or None when no output directory is configured
        """
        if self._output_dir is None:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_file = self._output_dir / f"{subname}_{timestamp}.json"

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(results, f, ensure_ascii=False, default=str)

        logger.info(f"Saved {subname} results to {output_file}")

        return output_file
