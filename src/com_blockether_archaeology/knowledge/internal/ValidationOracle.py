"""
Validation oracle: supplies corroborating concepts per category.

The pipeline only depends on the `ValidationOracle` protocol, so the static
table below can be swapped for a live lookup service without touching the
extractor.
"""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Protocol, Sequence, runtime_checkable

from rapidfuzz import fuzz

from .KnowledgeArchaeologyTypes import ValidationRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class ValidationOracle(Protocol):
    """Pure, side-effect-free lookup of corroborating records by category id."""

    def lookup(self, category_id: str) -> Sequence[ValidationRecord]: ...


DEFAULT_VALIDATION_RECORDS: List[ValidationRecord] = [
    ValidationRecord(
        category_id="algebraicFoundations",
        query="linear algebra machine learning",
        concepts=["linear algebra", "matrix operations", "eigenvalue decomposition", "singular value decomposition"],
        relevance=0.98,
        summary="Linear algebra fundamental to modern ML and AI systems",
    ),
    ValidationRecord(
        category_id="calculusAnalysis",
        query="calculus optimization algorithms",
        concepts=["calculus optimization", "gradient descent", "differential equations", "numerical methods"],
        relevance=0.96,
        summary="Calculus drives modern optimization in AI and engineering",
    ),
    ValidationRecord(
        category_id="trigonometricFunctions",
        query="trigonometry signal processing",
        concepts=["fourier transform", "sine waves", "signal analysis", "digital signal processing"],
        relevance=0.94,
        summary="Trigonometry essential for signal processing and wave analysis",
    ),
    ValidationRecord(
        category_id="physics",
        query="quantum computing physics",
        concepts=["quantum mechanics", "superposition", "entanglement", "quantum algorithms"],
        relevance=0.97,
        summary="Quantum physics revolutionizing computational paradigms",
    ),
    ValidationRecord(
        category_id="physics",
        query="wave mechanics computation",
        concepts=["wave function", "interference patterns", "resonance", "harmonic analysis"],
        relevance=0.93,
        summary="Wave mechanics principles applied in computational systems",
    ),
    ValidationRecord(
        category_id="chemistry",
        query="molecular modeling algorithms",
        concepts=["molecular dynamics", "chemical simulation", "drug discovery", "protein folding"],
        relevance=0.95,
        summary="Chemistry drives pharmaceutical and materials science computing",
    ),
    ValidationRecord(
        category_id="biology",
        query="bioinformatics genomics",
        concepts=["dna sequencing", "genomic analysis", "evolutionary algorithms", "protein structure"],
        relevance=0.96,
        summary="Biology inspiring next-generation computing algorithms",
    ),
    ValidationRecord(
        category_id="consciousness",
        query="artificial consciousness research",
        concepts=["artificial consciousness", "cognitive architectures", "meta-learning", "self-awareness"],
        relevance=0.95,
        summary="Research in artificial consciousness shows progress in meta-cognitive architectures",
    ),
    ValidationRecord(
        category_id="revolutionary",
        query="decentralized autonomous systems",
        concepts=[
            "decentralized autonomous organizations",
            "P2P networks",
            "blockchain governance",
            "democratic protocols",
        ],
        relevance=0.9,
        summary="Decentralized systems moving toward more democratic governance models",
    ),
    ValidationRecord(
        category_id="sacredGeometry",
        query="sacred geometry optimization algorithms",
        concepts=["golden ratio optimization", "fractal algorithms", "geometric computing", "phi-based systems"],
        relevance=0.85,
        summary="Sacred geometry principles showing applications in algorithm optimization",
    ),
]


class StaticValidationOracle:
    """Oracle backed by an in-memory table of validation records."""

    def __init__(self, records: Iterable[ValidationRecord] = ()):
        self._records: Dict[str, List[ValidationRecord]] = defaultdict(list)
        for record in records:
            self._records[record.category_id].append(record)

    @classmethod
    def default(cls) -> "StaticValidationOracle":
        return cls(DEFAULT_VALIDATION_RECORDS)

    @classmethod
    def from_json_file(cls, path: Path) -> "StaticValidationOracle":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(ValidationRecord.model_validate(entry) for entry in data)

    def lookup(self, category_id: str) -> Sequence[ValidationRecord]:
        return tuple(self._records.get(category_id, ()))

    @property
    def records(self) -> List[ValidationRecord]:
        return [record for records in self._records.values() for record in records]


def is_corroborated(lexeme: str, records: Sequence[ValidationRecord], threshold: float = 100.0) -> bool:
    """
    Check whether a matched lexeme is corroborated by any record concept.

    A lexeme is corroborated when its best partial alignment against a
    concept scores at least `threshold`. At 100 this is plain containment
    in either direction, case-insensitively.

    Args:
        lexeme: Matched text
        records: Records returned by the oracle for the lexeme's category
        threshold: Minimum rapidfuzz partial_ratio score

    Returns:
        True if any concept corroborates the lexeme
    """
    needle = lexeme.lower().strip()
    if not needle:
        return False
    for record in records:
        for concept in record.concepts:
            if fuzz.partial_ratio(needle, concept.lower()) >= threshold:
                return True
    return False
