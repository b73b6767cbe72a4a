"""
Configuration models for the knowledge archaeology pipeline.

Every tunable constant of the pipeline lives here as a validated pydantic
field, so scoring and selection behaviour can be changed from a JSON file
without touching traversal logic.
"""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

PHI = (1 + math.sqrt(5)) / 2


class ScannerSettings(BaseModel):
    """Settings for corpus discovery."""

    allowed_extensions: List[str] = Field(
        default_factory=lambda: ["md", "txt", "js", "ts", "json", "py", "java", "cpp", "c", "rs", "go", "rb"],
        description="File extensions (without dot, case-insensitive) considered as documents",
    )
    excluded_directories: List[str] = Field(
        default_factory=lambda: ["node_modules", ".git", "__pycache__", ".venv", "dist", "build"],
        description="Directory names that are never descended into",
    )
    min_size_bytes: int = Field(default=50, ge=0, description="Files must be strictly larger than this")
    max_size_bytes: int = Field(default=20_000_000, ge=1, description="Files must be strictly smaller than this")
    max_files: Optional[int] = Field(default=None, ge=1, description="Optional cap on the number of documents")

    @model_validator(mode="after")
    def _check_bounds(self) -> "ScannerSettings":
        if self.min_size_bytes >= self.max_size_bytes:
            raise ValueError("min_size_bytes must be smaller than max_size_bytes")
        return self

    def normalized_extensions(self) -> List[str]:
        """Lowercase extensions with any leading dot removed."""
        return [ext.lower().lstrip(".") for ext in self.allowed_extensions]


class ExtractionSettings(BaseModel):
    """Settings for lexical and structural fact extraction."""

    validated_confidence: float = Field(default=0.95, ge=0.0, le=1.0)
    unvalidated_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    base_fitness: float = Field(
        default=0.7,
        ge=0.0,
        description="Fitness assigned to lexical facts before any bonus is applied",
    )
    structural_confidences: Dict[str, float] = Field(
        default_factory=lambda: {"contains": 0.75, "has_numeric_value": 0.7, "contains_array": 0.8},
        description="Confidence (and base fitness) for each structural relation",
    )
    structure_label: str = Field(default="JSON Structure", description="Subject of structural facts")
    structural_max_depth: int = Field(default=4, ge=0, description="Deepest nesting level walked")
    max_structural_string_length: int = Field(
        default=200,
        ge=1,
        description="String values at or above this length do not produce 'contains' facts",
    )
    structured_formats: List[str] = Field(
        default_factory=lambda: ["json"],
        description="Format tags parsed as key/value documents",
    )
    oracle_match_threshold: float = Field(
        default=100.0,
        ge=0.0,
        le=100.0,
        description="rapidfuzz partial_ratio needed for a lexeme to count as corroborated",
    )
    emit_oracle_facts: bool = Field(
        default=False,
        description="Emit (oracle subject, validates, concept) facts for every oracle concept",
    )
    oracle_subject: str = Field(default="Web Knowledge System")
    max_concurrent_documents: int = Field(default=8, ge=1, le=256)
    read_retries: int = Field(default=2, ge=1, description="Attempts for transient read errors")


class ScoringTable(BaseModel):
    """Declarative fitness multipliers and selection rule constants."""

    category_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {
            "consciousness": 1.3,
            "revolutionary": 1.25,
            "physics": 1.3,
            "chemistry": 1.28,
            "biology": 1.28,
            "calculusAnalysis": 1.25,
            "algebraicFoundations": 1.2,
            "sacredGeometry": 1.15,
        },
        description="Per-category priority bonus; unlisted categories use default_category_multiplier",
    )
    default_category_multiplier: float = Field(default=1.0, ge=0.0)
    corroboration_multiplier: float = Field(default=1.3, ge=0.0, description="Applied to oracle-validated facts")
    external_validation_multiplier: float = Field(
        default=1.4,
        ge=0.0,
        description="Applied to facts of externally-validated categories",
    )
    format_multipliers: Dict[str, float] = Field(
        default_factory=lambda: {"typescript": 1.15, "rust": 1.12, "python": 1.1},
        description="Per-format priority bonus; unlisted formats use default_format_multiplier",
    )
    default_format_multiplier: float = Field(default=1.0, ge=0.0)

    isolated_multiplier: float = Field(default=0.7, ge=0.0)
    healthy_multiplier: float = Field(default=1.4, ge=0.0)
    overcrowded_multiplier: float = Field(default=0.8, ge=0.0)
    healthy_min_neighbors: int = Field(default=2, ge=0)
    healthy_max_neighbors: int = Field(default=5, ge=0)

    survival_threshold: float = Field(default=0.25, description="Facts survive iff fitness exceeds this")
    min_fitness: float = Field(default=0.0, ge=0.0)
    max_fitness: float = Field(default=5.0, gt=0.0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "ScoringTable":
        if self.healthy_min_neighbors > self.healthy_max_neighbors:
            raise ValueError("healthy_min_neighbors must not exceed healthy_max_neighbors")
        if self.min_fitness >= self.max_fitness:
            raise ValueError("min_fitness must be smaller than max_fitness")
        if not self.min_fitness <= self.survival_threshold < self.max_fitness:
            raise ValueError("survival_threshold must lie within [min_fitness, max_fitness)")
        for name, value in {**self.category_multipliers, **self.format_multipliers}.items():
            if value < 0:
                raise ValueError(f"multiplier for {name} must be non-negative")
        return self

    def category_multiplier(self, category_id: Optional[str]) -> float:
        if category_id is None:
            return self.default_category_multiplier
        return self.category_multipliers.get(category_id, self.default_category_multiplier)

    def format_multiplier(self, format_tag: str) -> float:
        return self.format_multipliers.get(format_tag, self.default_format_multiplier)

    def selection_multiplier(self, neighbor_count: int) -> float:
        """Selection factor for a neighbor count: isolated, healthy or overcrowded."""
        if neighbor_count < self.healthy_min_neighbors:
            return self.isolated_multiplier
        if neighbor_count <= self.healthy_max_neighbors:
            return self.healthy_multiplier
        return self.overcrowded_multiplier

    def clip(self, fitness: float) -> float:
        return min(self.max_fitness, max(self.min_fitness, fitness))


class GenerationMode(str, Enum):
    SINGLE = "single"
    FIXED_POINT = "fixed_point"


class SurvivalSettings(BaseModel):
    """How many selection generations to run."""

    mode: GenerationMode = Field(default=GenerationMode.SINGLE)
    max_generations: int = Field(
        default=10,
        ge=1,
        description="Upper bound on generations in fixed_point mode",
    )


class MergeSettings(BaseModel):
    """Merge policy for cross-source deduplication."""

    quality_fields: Tuple[str, ...] = Field(
        default=("confidence", "fitness", "revolutionary_value"),
        description="Numeric fields merged with a monotonic max",
    )
    freshness_fields: Tuple[str, ...] = Field(
        default=("timestamp",),
        description="Single-valued fields where the latest value wins",
    )
    coherence_scale: float = Field(
        default=PHI / 2,
        gt=0.0,
        description="Aggregate coherence = mean quality * coherence_scale, capped at 1.0",
    )
    manuscript_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    manuscript_content_limit: int = Field(default=500, ge=1)


class StatisticsSettings(BaseModel):
    """Constants for aggregate statistics."""

    coherence_scale: float = Field(default=0.85, gt=0.0, description="Overall coherence = mean fitness * scale")
    max_cross_references: int = Field(default=25, ge=0)
    mathematical_rank_limit: int = Field(
        default=4,
        ge=0,
        description="Progression chains starting at or below this rank are 'mathematical', above are 'scientific'",
    )


class ArchaeologySettings(BaseModel):
    """Unified settings for a full pipeline run."""

    scanner: ScannerSettings = Field(default_factory=ScannerSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    scoring: ScoringTable = Field(default_factory=ScoringTable)
    survival: SurvivalSettings = Field(default_factory=SurvivalSettings)
    merge: MergeSettings = Field(default_factory=MergeSettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)

    catalog_path: Optional[Path] = Field(
        default=None,
        description="JSON file with category definitions; the built-in catalog is used when unset",
    )
    output_dir: Optional[Path] = Field(
        default=None,
        description="Directory for per-stage snapshots; snapshots are skipped when unset",
    )
    source_id: str = Field(default="knowledge-archaeology", description="Identifier of this run's output")

    @classmethod
    def from_json_file(cls, path: Path) -> "ArchaeologySettings":
        """Load settings from a JSON file; missing keys keep their defaults."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
