#!/usr/bin/env python3
"""
Knowledge archaeology over a directory tree.

Scans a corpus, extracts facts, culls them with the survival filter, merges
the survivors with previously persisted knowledge bases and prints a summary.

Usage:
    uv run python3 tools/KnowledgeArchaeology.py <corpus_dir> [output_dir] [prior.json ...]

Examples:
    # Excavate the current repository
    uv run python3 tools/KnowledgeArchaeology.py .

    # Merge with the knowledge base of an earlier run
    uv run python3 tools/KnowledgeArchaeology.py docs/ output/ output/knowledge_base.json
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import anyio
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from com_blockether_archaeology.knowledge import ArchaeologySettings, KnowledgeArchaeologyCore, KnowledgeBase

console = Console()


class KnowledgeArchaeology:
    """Runs the pipeline and renders the resulting knowledge base."""

    def __init__(
        self,
        corpus_dir: Path,
        output_dir: Optional[Path] = None,
        prior: Optional[List[Path]] = None,
        log_level: int = logging.INFO,
    ):
        """
        Args:
            corpus_dir: Root directory to scan
            output_dir: Directory for stage snapshots and the final knowledge base. Defaults to "output/"
            prior: Knowledge base files from earlier runs to merge with
            log_level: Logging level. Defaults to INFO
        """
        self.corpus_dir = corpus_dir
        self.output_dir = output_dir or Path("output/")
        self.prior = prior or []
        self.log_level = log_level
        self._setup_logging()

    def _setup_logging(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.output_dir / "archaeology.log"

        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)],
        )
        self.logger = logging.getLogger(__name__)
        self.logger.info(f"Corpus: {self.corpus_dir}")
        self.logger.info(f"Output: {self.output_dir}")
        self.logger.info(f"Log: {log_file}")

    async def run(self) -> KnowledgeBase:
        settings = ArchaeologySettings(output_dir=self.output_dir)
        core = KnowledgeArchaeologyCore(settings)
        knowledge_base = await core.excavate(self.corpus_dir, self.prior)

        output_file = knowledge_base.to_json_file(self.output_dir / "knowledge_base.json")
        self.render(knowledge_base)
        console.print(f"[green]✓ Saved knowledge base to {output_file}[/green]")
        return knowledge_base

    def render(self, knowledge_base: KnowledgeBase) -> None:
        metadata = knowledge_base.metadata
        statistics = knowledge_base.statistics

        console.print(
            Panel.fit(
                f"[bold]{metadata.source_id}[/bold]\n"
                f"Documents: {metadata.documents_processed}/{metadata.documents_scanned}  "
                f"Raw facts: {metadata.raw_facts}  Survivors: {metadata.surviving_facts}\n"
                f"Coherence: {metadata.coherence:.3f}  Failures: {metadata.failures.total}",
                title="Knowledge Archaeology",
            )
        )

        table = Table(title="Categories")
        table.add_column("Category", style="cyan")
        table.add_column("Facts", justify="right")
        table.add_column("Avg fitness", justify="right", style="green")
        table.add_column("Validated", justify="right")
        for category_id in statistics.ranking:
            stats = statistics.categories[category_id]
            table.add_row(
                category_id,
                str(stats.count),
                f"{stats.average_fitness:.3f}",
                f"{stats.validation_ratio:.0%}",
            )
        console.print(table)

        if statistics.cross_references:
            references = Table(title="Cross references")
            references.add_column("Concept", style="cyan")
            references.add_column("Documents", justify="right")
            references.add_column("Avg fitness", justify="right", style="green")
            for reference in statistics.cross_references:
                references.add_row(reference.concept, str(len(reference.documents)), f"{reference.average_fitness:.3f}")
            console.print(references)

        collections = Table(title="Collections")
        collections.add_column("Collection", style="cyan")
        collections.add_column("Items", justify="right")
        for key, count in sorted(metadata.item_counts.items()):
            collections.add_row(key, str(count))
        console.print(collections)


async def main() -> None:
    if len(sys.argv) < 2:
        console.print("[red]Usage: python KnowledgeArchaeology.py <corpus_dir> [output_dir] [prior.json ...][/red]")
        sys.exit(1)

    corpus_dir = Path(sys.argv[1])
    if not corpus_dir.is_dir():
        console.print(f"[red]Error: Directory '{corpus_dir}' not found.[/red]")
        sys.exit(1)

    output_dir = Path(sys.argv[2]) if len(sys.argv) > 2 else None
    prior = [Path(arg) for arg in sys.argv[3:]]

    try:
        await KnowledgeArchaeology(corpus_dir, output_dir, prior).run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")


if __name__ == "__main__":
    anyio.run(main)
