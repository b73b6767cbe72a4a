"""
Corpus discovery: enumerate and classify candidate documents under a root.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .KnowledgeArchaeologyErrors import DocumentReadError
from .KnowledgeArchaeologySettings import ScannerSettings
from .KnowledgeArchaeologyTypes import CorpusScan, Document

logger = logging.getLogger(__name__)

FORMAT_TAGS: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "rs": "rust",
    "go": "go",
    "rb": "ruby",
    "json": "json",
    "md": "markdown",
    "txt": "text",
}

LANGUAGES: Dict[str, str] = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "java": "Java",
    "cpp": "C++",
    "c": "C",
    "rs": "Rust",
    "go": "Go",
    "rb": "Ruby",
}


def classify_format(extension: str) -> str:
    return FORMAT_TAGS.get(extension.lower().lstrip("."), "unknown")


def detect_language(extension: str) -> str:
    return LANGUAGES.get(extension.lower().lstrip("."), "Unknown")


class FileCorpusScanner:
    """
    Walks a directory tree and returns candidate documents sorted by path.

    Excluded directories are pruned before descending. Files outside the
    exclusive size bounds are skipped. Paths that cannot be inspected are
    recorded and skipped; they never abort the scan.
    """

    def __init__(self, settings: Optional[ScannerSettings] = None):
        self._settings = settings or ScannerSettings()
        self._extensions = set(self._settings.normalized_extensions())
        self._excluded = set(self._settings.excluded_directories)

    @property
    def settings(self) -> ScannerSettings:
        return self._settings

    def scan(self, root: Path) -> CorpusScan:
        root = Path(root)
        skipped: List[str] = []
        candidates: List[Document] = []
        out_of_bounds = 0

        if not root.is_dir():
            logger.warning(f"Corpus root {root} is not a directory, nothing to scan")
            return CorpusScan(root=root, skipped_paths=[str(root)])

        def on_error(error: OSError) -> None:
            logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")
            skipped.append(str(error.filename))

        for directory, dirnames, filenames in os.walk(root, onerror=on_error):
            dirnames[:] = sorted(name for name in dirnames if name not in self._excluded)
            for filename in filenames:
                path = Path(directory) / filename
                extension = path.suffix.lower().lstrip(".")
                if extension not in self._extensions:
                    continue
                try:
                    stat = path.stat()
                except OSError as e:
                    logger.warning(f"Skipping {path}: {e}")
                    skipped.append(str(path))
                    continue
                if not self._settings.min_size_bytes < stat.st_size < self._settings.max_size_bytes:
                    logger.debug(f"Skipping {path}: size {stat.st_size} out of bounds")
                    out_of_bounds += 1
                    continue
                candidates.append(
                    Document(
                        path=path,
                        size=stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                        extension=extension,
                        format_tag=classify_format(extension),
                        language=detect_language(extension),
                    )
                )

        candidates.sort(key=lambda document: str(document.path))
        if self._settings.max_files is not None:
            candidates = candidates[: self._settings.max_files]

        logger.info(
            f"Scanned {root}: {len(candidates)} documents, {out_of_bounds} out of bounds, {len(skipped)} unreadable"
        )
        return CorpusScan(root=root, documents=candidates, skipped_paths=sorted(skipped), out_of_bounds=out_of_bounds)

    def read(self, document: Document) -> str:
        """
        Read a document's text.

        Raises:
            DocumentReadError: If the file is gone, unreadable or grew past the size bound
        """
        try:
            size = document.path.stat().st_size
        except FileNotFoundError as e:
            raise DocumentReadError(document.reference, "file no longer exists") from e
        if size >= self._settings.max_size_bytes:
            raise DocumentReadError(document.reference, f"size {size} exceeds bound")
        return document.path.read_text(encoding="utf-8", errors="replace")
