"""
Error taxonomy for the knowledge archaeology pipeline.

Only catalog invariant violations are fatal. Every other error is raised
close to where it happens and recovered one level up (skip and count), so a
single bad document or collection never aborts a batch.
"""

from typing import Optional


class KnowledgeArchaeologyError(Exception):
    """Base class for all pipeline errors."""


class DocumentReadError(KnowledgeArchaeologyError):
    """Raised when a document cannot be read or is out of bounds."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read document {path}: {reason}")


class MalformedStructuredInput(KnowledgeArchaeologyError):
    """Raised when a structured (key/value) document fails to parse."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed structured document {path}: {reason}")


class CorruptKnowledgeCollection(KnowledgeArchaeologyError):
    """Raised when a merger input has an unrecognized shape."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Corrupt knowledge collection {source}: {reason}")


class InvariantViolation(KnowledgeArchaeologyError):
    """Raised when a data model invariant does not hold."""

    def __init__(self, reason: str, item_id: Optional[str] = None):
        self.reason = reason
        self.item_id = item_id
        message = f"[{item_id}] {reason}" if item_id else reason
        super().__init__(message)


class CatalogInvariantViolation(InvariantViolation):
    """Raised at catalog load time; always fatal."""
