"""
Normalization of heterogeneous knowledge collections into flat KnowledgeItems.

Accepted layouts:

- flat named collections, both the persisted snake_case keys and the legacy
  camelCase keys (`triples`, `topTriples`, `revolutionaryPatterns`, ...)
- trie layout: `root.children` nodes holding `triples`, nested to any depth
- manuscript layout: `sections` with `title` and `content`

Anything else is a CorruptKnowledgeCollection.
"""

import json
import logging
import numbers
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .KnowledgeArchaeologyErrors import CorruptKnowledgeCollection
from .KnowledgeArchaeologySettings import MergeSettings
from .KnowledgeArchaeologyTypes import (
    RESERVED_ITEM_FIELDS,
    KnowledgeItem,
    canonical_json,
    normalize_component,
    text_hash,
)

logger = logging.getLogger(__name__)

# (path into the document, item kind)
COLLECTION_PATHS: List[Tuple[Tuple[str, ...], str]] = [
    (("triples",), "triple"),
    (("topTriples",), "triple"),
    (("allTriples",), "triple"),
    (("extractedKnowledge", "triples"), "triple"),
    (("ultimateIntegration", "strongestValidations"), "triple"),
    (("axioms",), "axiom"),
    (("patterns",), "pattern"),
    (("revolutionaryPatterns",), "pattern"),
    (("enhanced_patterns",), "enhanced_pattern"),
    (("enhancedPatterns",), "enhanced_pattern"),
    (("web_knowledge",), "web_knowledge"),
    (("webKnowledge",), "web_knowledge"),
    (("mathematical_chains",), "math_chain"),
    (("mathematicalChains",), "math_chain"),
    (("science_validations",), "science_validation"),
    (("scienceValidations",), "science_validation"),
    (("cross_references",), "cross_reference"),
    (("crossFileRelationships",), "cross_reference"),
    (("harmonic_signatures",), "harmonic_signature"),
    (("harmonicSignatures",), "harmonic_signature"),
]

FIELD_ALIASES: Dict[str, str] = {
    "survivalFitness": "fitness",
    "survival_fitness": "fitness",
    "csCategory": "category_id",
    "category": "category_id",
    "fileType": "format_tag",
    "revolutionaryValue": "revolutionary_value",
    "webValidated": "validated",
    "scientificValidation": "externally_validated",
    "programmingLanguage": "language",
    "progressionLevel": "progression_rank",
    "dataType": "data_type",
}

ORIGIN_FIELDS = ("sourceFile", "sourceFiles", "source_file", "source_files", "file", "files", "origins")

# Checked in order; the first non-empty string names the item.
NATURAL_KEY_FIELDS = ("pattern", "statement", "axiom", "concept", "query", "title", "content")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class KnowledgeSource(BaseModel):
    """A previously produced knowledge collection, parsed but not yet normalized."""

    source_id: str = Field(description="Identifier added to the origins of every item")
    data: Any = Field(description="Parsed JSON document")

    @classmethod
    def from_json_file(cls, path: Path) -> "KnowledgeSource":
        """
        Raises:
            CorruptKnowledgeCollection: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptKnowledgeCollection(str(path), str(e)) from e
        source_id = str(path)
        if isinstance(data, dict) and isinstance(data.get("metadata"), dict):
            source_id = str(data["metadata"].get("source_id") or source_id)
        return cls(source_id=source_id, data=data)


class KnowledgeCollectionNormalizer:
    """Turns raw collection documents into kind-tagged, hashed KnowledgeItems."""

    def __init__(self, settings: Optional[MergeSettings] = None):
        self._settings = settings or MergeSettings()

    def normalize(self, source: KnowledgeSource) -> List[KnowledgeItem]:
        """
        Flatten every recognized collection of a source.

        Raises:
            CorruptKnowledgeCollection: If the document has no recognized shape
                or a recognized collection holds something other than records
        """
        data = source.data
        if not isinstance(data, dict):
            raise CorruptKnowledgeCollection(source.source_id, f"expected an object, got {type(data).__name__}")

        items: List[KnowledgeItem] = []
        recognized = "metadata" in data

        for path, kind in COLLECTION_PATHS:
            found, records = self._resolve(data, path)
            if not found:
                continue
            recognized = True
            for record in self._records(source.source_id, ".".join(path), records):
                items.append(self.normalize_record(record, kind, source.source_id))

        root = data.get("root")
        if isinstance(root, dict) and "children" in root:
            recognized = True
            for record in self._trie_records(source.source_id, root, depth=0):
                items.append(self.normalize_record(record, "triple", source.source_id))

        if "sections" in data:
            recognized = True
            for section in self._records(source.source_id, "sections", data["sections"]):
                items.append(self.normalize_record(self._section_record(section), "pattern", source.source_id))

        if not recognized:
            raise CorruptKnowledgeCollection(source.source_id, "no recognized collection")

        logger.debug(f"Normalized {len(items)} items from {source.source_id}")
        return items

    @staticmethod
    def _resolve(data: Dict[str, Any], path: Tuple[str, ...]) -> Tuple[bool, Any]:
        node: Any = data
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return False, None
            node = node[key]
        return True, node

    @staticmethod
    def _records(source_id: str, name: str, records: Any) -> Iterator[Dict[str, Any]]:
        if not isinstance(records, list):
            raise CorruptKnowledgeCollection(source_id, f"'{name}' is not a list")
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise CorruptKnowledgeCollection(source_id, f"'{name}[{index}]' is not an object")
            yield record

    def _trie_records(self, source_id: str, node: Any, depth: int) -> Iterator[Dict[str, Any]]:
        if not isinstance(node, dict):
            raise CorruptKnowledgeCollection(source_id, f"trie node at depth {depth} is not an object")
        if "triples" in node:
            yield from self._records(source_id, "root...triples", node["triples"])
        children = node.get("children") or {}
        if isinstance(children, dict):
            children = [children[key] for key in sorted(children)]
        if not isinstance(children, list):
            raise CorruptKnowledgeCollection(source_id, f"trie children at depth {depth} are not a collection")
        for child in children:
            yield from self._trie_records(source_id, child, depth + 1)

    def _section_record(self, section: Dict[str, Any]) -> Dict[str, Any]:
        content = section.get("content")
        return {
            "pattern": section.get("title", ""),
            "content": content[: self._settings.manuscript_content_limit] if isinstance(content, str) else content,
            "confidence": self._settings.manuscript_confidence,
            "type": "manuscript_section",
        }

    def normalize_record(self, record: Dict[str, Any], kind: str, source_id: Optional[str] = None) -> KnowledgeItem:
        """Rename legacy fields, collect origins, sanitize merge fields and hash one record."""
        fields: Dict[str, Any] = {}
        origins = set()
        for key, value in record.items():
            if key in ORIGIN_FIELDS:
                origins.update(self._origin_values(value))
                continue
            name = FIELD_ALIASES.get(key) or to_snake_case(key)
            if name in RESERVED_ITEM_FIELDS or name in fields:
                continue
            fields[name] = value

        for name in self._settings.quality_fields:
            value = fields.get(name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, numbers.Real)):
                logger.debug(f"Dropping non-numeric {name}={value!r}")
                del fields[name]
        for name in self._settings.freshness_fields:
            if fields.get(name) is not None:
                fields[name] = str(fields[name])

        if kind == "triple" and all(fields.get(part) not in (None, "") for part in ("subject", "predicate", "object")):
            for part in ("subject", "predicate", "object"):
                fields[part] = str(fields[part])
            if fields.get("document") is None and len(origins) == 1:
                fields["document"] = next(iter(origins))

        if source_id:
            origins.add(source_id)
        return KnowledgeItem(id=self.item_id(fields), kind=kind, origins=sorted(origins), fields=fields)

    @staticmethod
    def _origin_values(value: Any) -> List[str]:
        if value is None or value == "":
            return []
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value if v not in (None, "")]
        return [str(value)]

    def identity(self, fields: Dict[str, Any]) -> str:
        """
        The content an item's id is derived from.

        Triples use their normalized subject|predicate|object. Other records
        use their first natural key field, and records without one use their
        canonical JSON minus the fields the merger manages.
        """
        if all(fields.get(part) not in (None, "") for part in ("subject", "predicate", "object")):
            return "|".join(normalize_component(fields[part]) for part in ("subject", "predicate", "object"))
        for name in NATURAL_KEY_FIELDS:
            value = fields.get(name)
            if isinstance(value, str) and value.strip():
                return f"{name}:{normalize_component(value)}"
        managed = set(self._settings.quality_fields) | set(self._settings.freshness_fields) | RESERVED_ITEM_FIELDS
        return canonical_json({key: value for key, value in fields.items() if key not in managed})

    def item_id(self, fields: Dict[str, Any]) -> str:
        """Equals `content_hash(subject, predicate, object)` for triples."""
        return text_hash(self.identity(fields))


def normalize_sources(
    normalizer: KnowledgeCollectionNormalizer,
    sources: Sequence[KnowledgeSource],
) -> Tuple[List[Tuple[str, List[KnowledgeItem]]], List[str]]:
    """
    Normalize several sources, skipping corrupt ones.

    Returns:
        (source id, items) pairs in input order, and the ids of skipped sources
    """
    normalized: List[Tuple[str, List[KnowledgeItem]]] = []
    skipped: List[str] = []
    for source in sources:
        try:
            normalized.append((source.source_id, normalizer.normalize(source)))
        except CorruptKnowledgeCollection as e:
            logger.warning(f"Skipping {e}")
            skipped.append(source.source_id)
    return normalized, skipped
