"""
Fact extraction: lexical category matching plus a structural walker for
key/value documents.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .CategoryPatternCatalog import CategoryPatternCatalog, PatternCategory
from .KnowledgeArchaeologyErrors import MalformedStructuredInput
from .KnowledgeArchaeologySettings import ExtractionSettings
from .KnowledgeArchaeologyTypes import (
    Document,
    ExtractionAccumulator,
    Fact,
    FailureCounts,
    ValidationRecord,
)
from .ValidationOracle import ValidationOracle, is_corroborated

logger = logging.getLogger(__name__)

ORACLE_ORIGIN = "validation-oracle"


class TripleExtractor:
    """
    Applies a category catalog to document text and emits raw Facts.

    One Fact is emitted per match occurrence, so a lexeme appearing three
    times in a document yields three Facts with the same id. Oracle lookups
    are cached per category for the lifetime of the extractor.
    """

    def __init__(
        self,
        catalog: CategoryPatternCatalog,
        oracle: ValidationOracle,
        settings: Optional[ExtractionSettings] = None,
    ):
        self._catalog = catalog
        self._oracle = oracle
        self._settings = settings or ExtractionSettings()
        self._records: Dict[str, Sequence[ValidationRecord]] = {}

    @property
    def catalog(self) -> CategoryPatternCatalog:
        return self._catalog

    def _records_for(self, category_id: str) -> Sequence[ValidationRecord]:
        if category_id not in self._records:
            self._records[category_id] = tuple(self._oracle.lookup(category_id))
        return self._records[category_id]

    def extract(self, document: Document, text: str) -> ExtractionAccumulator:
        """
        Extract all facts from one document.

        Structured documents are walked first and then matched as text. A
        structured document that fails to parse is counted as malformed and
        still goes through text extraction.
        """
        facts: List[Fact] = []
        failures = FailureCounts()

        if document.format_tag in self._settings.structured_formats:
            try:
                data = self.parse_structured(document, text)
                facts.extend(self.extract_structure(data, document))
            except MalformedStructuredInput as e:
                logger.warning(f"{e}; falling back to text extraction")
                failures = FailureCounts(malformed_structured_documents=1)

        facts.extend(self.extract_text(text, document))
        logger.debug(f"Extracted {len(facts)} facts from {document.reference}")
        return ExtractionAccumulator(facts=facts, documents_processed=1, failures=failures)

    @staticmethod
    def parse_structured(document: Document, text: str) -> Any:
        try:
            return json.loads(text)
        except (json.JSONDecodeError, RecursionError) as e:
            raise MalformedStructuredInput(document.reference, str(e)) from e

    def extract_text(self, text: str, document: Document) -> List[Fact]:
        facts: List[Fact] = []
        for category in self._catalog:
            records = self._records_for(category.id)
            for lexeme in category.find_lexemes(text):
                validated = is_corroborated(lexeme, records, self._settings.oracle_match_threshold)
                facts.append(self._lexical_fact(category, lexeme, validated, document))
        return facts

    def _lexical_fact(
        self,
        category: PatternCategory,
        lexeme: str,
        validated: bool,
        document: Document,
    ) -> Fact:
        return Fact(
            subject=category.label,
            predicate="implements_validated" if validated else "implements",
            object=lexeme.lower(),
            confidence=self._settings.validated_confidence if validated else self._settings.unvalidated_confidence,
            category_id=category.id,
            document=document.reference,
            origins=[document.reference],
            format_tag=document.format_tag,
            language=document.language,
            data_type="lexical",
            validated=validated,
            externally_validated=category.externally_validated,
            progression_rank=category.progression_rank,
            dependencies=list(category.dependencies),
            fitness=self._settings.base_fitness,
            timestamp=document.modified.isoformat(),
        )

    def extract_structure(self, data: Any, document: Document, depth: int = 0) -> List[Fact]:
        """
        Walk a parsed key/value tree and emit one fact per qualifying key.

        Only mappings are descended into; arrays produce a single
        `contains_array` fact and are not traversed. Nesting deeper than
        `structural_max_depth` is ignored, which also bounds self-referential
        inputs.

        Args:
            data: Parsed document or sub-tree
            document: Producing document
            depth: Current nesting level, 0 for the document root

        Returns:
            Structural facts in traversal order
        """
        if depth > self._settings.structural_max_depth or not isinstance(data, dict):
            return []

        facts: List[Fact] = []
        for key, value in data.items():
            relation = self._structural_relation(value)
            if relation is not None:
                facts.append(self._structural_fact(str(key), relation, document))
            elif isinstance(value, dict):
                facts.extend(self.extract_structure(value, document, depth + 1))
        return facts

    def _structural_relation(self, value: Any) -> Optional[str]:
        if isinstance(value, str):
            if 0 < len(value) < self._settings.max_structural_string_length:
                return "contains"
            return None
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return "has_numeric_value"
        if isinstance(value, list):
            return "contains_array"
        return None

    def _structural_fact(self, key: str, relation: str, document: Document) -> Fact:
        confidence = self._settings.structural_confidences.get(relation, self._settings.base_fitness)
        return Fact(
            subject=self._settings.structure_label,
            predicate=relation,
            object=key,
            confidence=confidence,
            document=document.reference,
            origins=[document.reference],
            format_tag=document.format_tag,
            language=document.language,
            data_type="structured",
            fitness=confidence,
            timestamp=document.modified.isoformat(),
        )

    def oracle_facts(self) -> List[Fact]:
        """One `validates` fact per oracle concept, for every catalog category."""
        facts: List[Fact] = []
        for category in self._catalog:
            for record in self._records_for(category.id):
                for concept in record.concepts:
                    facts.append(
                        Fact(
                            subject=self._settings.oracle_subject,
                            predicate="validates",
                            object=concept,
                            confidence=record.relevance,
                            category_id=category.id,
                            origins=[ORACLE_ORIGIN],
                            format_tag="oracle",
                            data_type="oracle",
                            validated=True,
                            externally_validated=category.externally_validated,
                            progression_rank=category.progression_rank,
                            dependencies=list(category.dependencies),
                            fitness=record.relevance,
                        )
                    )
        return facts
