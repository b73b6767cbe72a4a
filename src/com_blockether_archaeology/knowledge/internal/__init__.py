from .AggregateStatisticsComputer import AggregateStatisticsComputer
from .CategoryPatternCatalog import CategoryDefinition, CategoryPatternCatalog, PatternCategory, compile_matcher
from .ConnectionGraphBuilder import ConnectionGraphBuilder, count_neighbors_naive, is_neighbor
from .FileCorpusScanner import FileCorpusScanner, classify_format, detect_language
from .KnowledgeArchaeologyErrors import (
    CatalogInvariantViolation,
    CorruptKnowledgeCollection,
    DocumentReadError,
    InvariantViolation,
    KnowledgeArchaeologyError,
    MalformedStructuredInput,
)
from .KnowledgeArchaeologySettings import (
    PHI,
    ArchaeologySettings,
    ExtractionSettings,
    GenerationMode,
    MergeSettings,
    ScannerSettings,
    ScoringTable,
    StatisticsSettings,
    SurvivalSettings,
)
from .KnowledgeArchaeologyTypes import (
    AggregateStatistics,
    CategoryStatistics,
    CollectionSummary,
    CorpusScan,
    CrossReference,
    Document,
    ExtractionAccumulator,
    Fact,
    FailureCounts,
    FormatStatistics,
    KnowledgeBase,
    KnowledgeBaseMetadata,
    KnowledgeItem,
    MergeSummary,
    ProgressionChain,
    ValidationRecord,
    content_hash,
    normalize_component,
)
from .KnowledgeCollectionNormalizer import KnowledgeCollectionNormalizer, KnowledgeSource
from .SurvivalFilter import FitnessScorer, SurvivalFilter, SurvivalOutcome
from .TripleExtractor import TripleExtractor
from .ValidationOracle import StaticValidationOracle, ValidationOracle, is_corroborated

__all__ = [
    "AggregateStatisticsComputer",
    "CategoryDefinition",
    "CategoryPatternCatalog",
    "PatternCategory",
    "compile_matcher",
    "ConnectionGraphBuilder",
    "count_neighbors_naive",
    "is_neighbor",
    "FileCorpusScanner",
    "classify_format",
    "detect_language",
    "KnowledgeArchaeologyError",
    "DocumentReadError",
    "MalformedStructuredInput",
    "CorruptKnowledgeCollection",
    "InvariantViolation",
    "CatalogInvariantViolation",
    "PHI",
    "ArchaeologySettings",
    "ScannerSettings",
    "ExtractionSettings",
    "ScoringTable",
    "GenerationMode",
    "SurvivalSettings",
    "MergeSettings",
    "StatisticsSettings",
    "AggregateStatistics",
    "CategoryStatistics",
    "CollectionSummary",
    "CorpusScan",
    "CrossReference",
    "Document",
    "ExtractionAccumulator",
    "Fact",
    "FailureCounts",
    "FormatStatistics",
    "KnowledgeBase",
    "KnowledgeBaseMetadata",
    "KnowledgeItem",
    "MergeSummary",
    "ProgressionChain",
    "ValidationRecord",
    "content_hash",
    "normalize_component",
    "KnowledgeCollectionNormalizer",
    "KnowledgeSource",
    "FitnessScorer",
    "SurvivalFilter",
    "SurvivalOutcome",
    "TripleExtractor",
    "StaticValidationOracle",
    "ValidationOracle",
    "is_corroborated",
]
