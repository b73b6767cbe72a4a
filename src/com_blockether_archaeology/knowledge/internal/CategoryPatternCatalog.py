"""
Category pattern catalog: named lexical matchers with dependency metadata.

The catalog is validated once at construction. Duplicate ids, empty term
lists, self references and dangling dependency ids raise
CatalogInvariantViolation before any document is touched.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Pattern, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .DefaultCategoryDefinitions import DEFAULT_CATEGORY_DEFINITIONS
from .KnowledgeArchaeologyErrors import CatalogInvariantViolation

logger = logging.getLogger(__name__)

_TERM_SEPARATOR = re.compile(r"[\s_-]+")


class CategoryDefinition(BaseModel):
    """Declarative definition of one pattern category."""

    id: str = Field(min_length=1, description="Unique category id")
    label: Optional[str] = Field(default=None, description="Subject label of extracted facts")
    concepts: List[str] = Field(default_factory=list, description="Concept keywords of the category")
    terms: List[str] = Field(
        default_factory=list,
        description="Lexemes matched in documents; defaults to concepts when empty",
    )
    dependencies: List[str] = Field(default_factory=list, description="Prerequisite category ids")
    progression_rank: int = Field(default=0, ge=0, description="Position in the refinement chain, 0 if none")
    externally_validated: bool = Field(default=False, description="Category grounded in an external domain")

    def subject_label(self) -> str:
        if self.label:
            return self.label
        return f"{self.id[:1].upper()}{self.id[1:]} System"

    def match_terms(self) -> List[str]:
        return list(self.terms or self.concepts)


class PatternCategory(BaseModel):
    """A validated category with its compiled matcher."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    concepts: tuple[str, ...]
    dependencies: tuple[str, ...]
    progression_rank: int
    externally_validated: bool
    matcher: Pattern[str]

    def find_lexemes(self, text: str) -> Iterator[str]:
        """Yield every match occurrence, in document order, as it appears in the text."""
        for match in self.matcher.finditer(text):
            yield match.group(0)


def compile_matcher(terms: Sequence[str]) -> Pattern[str]:
    """
    Compile a case-insensitive word-boundary matcher for a list of terms.

    Longer terms are tried first so "javascript" wins over "java". Each term
    accepts an optional trailing "s".

    Args:
        terms: Plain lexemes, not regular expressions

    Returns:
        Compiled pattern
    """
    alternatives = []
    for term in sorted({t.strip().lower() for t in terms if t.strip()}, key=lambda t: (-len(t), t)):
        parts = [re.escape(part) for part in _TERM_SEPARATOR.split(term) if part]
        alternatives.append(r"[\s_-]".join(parts))
    return re.compile(r"\b(?:" + "|".join(alternatives) + r")s?\b", re.IGNORECASE)


class CategoryPatternCatalog:
    """Immutable, validated registry of pattern categories in declaration order."""

    def __init__(self, definitions: Sequence[Union[CategoryDefinition, Mapping[str, Any]]]):
        parsed = [self._parse(definition) for definition in definitions]
        self._validate(parsed)
        self._categories: Dict[str, PatternCategory] = {}
        for definition in parsed:
            self._categories[definition.id] = PatternCategory(
                id=definition.id,
                label=definition.subject_label(),
                concepts=tuple(definition.concepts),
                dependencies=tuple(definition.dependencies),
                progression_rank=definition.progression_rank,
                externally_validated=definition.externally_validated,
                matcher=compile_matcher(definition.match_terms()),
            )
        logger.debug(f"Loaded catalog with {len(self._categories)} categories")

    @staticmethod
    def _parse(definition: Union[CategoryDefinition, Mapping[str, Any]]) -> CategoryDefinition:
        if isinstance(definition, CategoryDefinition):
            return definition
        try:
            return CategoryDefinition.model_validate(definition)
        except ValidationError as e:
            raise CatalogInvariantViolation(f"Invalid category definition: {e}") from e

    @staticmethod
    def _validate(definitions: Sequence[CategoryDefinition]) -> None:
        ids: List[str] = []
        for definition in definitions:
            if definition.id in ids:
                raise CatalogInvariantViolation("Duplicate category id", item_id=definition.id)
            if not definition.match_terms():
                raise CatalogInvariantViolation("Category has no terms to match", item_id=definition.id)
            ids.append(definition.id)

        known = set(ids)
        for definition in definitions:
            for dependency in definition.dependencies:
                if dependency == definition.id:
                    raise CatalogInvariantViolation("Category depends on itself", item_id=definition.id)
                if dependency not in known:
                    raise CatalogInvariantViolation(
                        f"Dependency '{dependency}' references no existing category",
                        item_id=definition.id,
                    )

    @classmethod
    def default(cls) -> "CategoryPatternCatalog":
        return cls(DEFAULT_CATEGORY_DEFINITIONS)

    @classmethod
    def from_json_file(cls, path: Path) -> "CategoryPatternCatalog":
        """
        Load a catalog from a JSON file holding a list of definitions,
        or an object with a "categories" list.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogInvariantViolation(f"Cannot load catalog from {path}: {e}") from e
        if isinstance(data, dict):
            data = data.get("categories")
        if not isinstance(data, list):
            raise CatalogInvariantViolation(f"Catalog file {path} holds no category list")
        return cls(data)

    @property
    def categories(self) -> List[PatternCategory]:
        return list(self._categories.values())

    def get(self, category_id: Optional[str]) -> Optional[PatternCategory]:
        if category_id is None:
            return None
        return self._categories.get(category_id)

    def __getitem__(self, category_id: str) -> PatternCategory:
        return self._categories[category_id]

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def __iter__(self) -> Iterator[PatternCategory]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)
