"""
Knowledge archaeology module.

Scans a document corpus, extracts typed facts with category pattern
matching, culls them with a neighbor-count survival filter and merges the
survivors with previously persisted knowledge bases.

Core functionality:
- KnowledgeArchaeologyCore: The full scan -> extract -> filter -> merge -> statistics pipeline
- KnowledgeMergeCore: Content-addressed merging of knowledge collections
- Types and settings: pydantic models for facts, knowledge bases and configuration
"""

from .internal.CategoryPatternCatalog import CategoryDefinition, CategoryPatternCatalog, PatternCategory
from .internal.KnowledgeArchaeologyErrors import (
    CatalogInvariantViolation,
    CorruptKnowledgeCollection,
    DocumentReadError,
    InvariantViolation,
    KnowledgeArchaeologyError,
    MalformedStructuredInput,
)
from .internal.KnowledgeArchaeologySettings import ArchaeologySettings, GenerationMode, ScoringTable
from .internal.KnowledgeArchaeologyTypes import (
    AggregateStatistics,
    Document,
    Fact,
    FailureCounts,
    KnowledgeBase,
    KnowledgeItem,
    ValidationRecord,
)
from .internal.ValidationOracle import StaticValidationOracle, ValidationOracle
from .KnowledgeArchaeologyCore import KnowledgeArchaeologyCore
from .KnowledgeMergeCore import KnowledgeMergeCore, MergeResult

__all__ = [
    "KnowledgeArchaeologyCore",
    "KnowledgeMergeCore",
    "MergeResult",
    "ArchaeologySettings",
    "GenerationMode",
    "ScoringTable",
    "CategoryDefinition",
    "CategoryPatternCatalog",
    "PatternCategory",
    "ValidationOracle",
    "StaticValidationOracle",
    "ValidationRecord",
    "Document",
    "Fact",
    "FailureCounts",
    "KnowledgeItem",
    "KnowledgeBase",
    "AggregateStatistics",
    "KnowledgeArchaeologyError",
    "DocumentReadError",
    "MalformedStructuredInput",
    "CorruptKnowledgeCollection",
    "InvariantViolation",
    "CatalogInvariantViolation",
]
