"""
Read-only aggregate statistics over a fact population.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .KnowledgeArchaeologySettings import StatisticsSettings
from .KnowledgeArchaeologyTypes import (
    AggregateStatistics,
    CategoryStatistics,
    CrossReference,
    Fact,
    FormatStatistics,
    ProgressionChain,
)

logger = logging.getLogger(__name__)


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole else 0.0


class AggregateStatisticsComputer:
    """Computes per-category, per-format and corpus-wide summaries. Never mutates its input."""

    def __init__(self, settings: Optional[StatisticsSettings] = None):
        self._settings = settings or StatisticsSettings()

    def compute(self, facts: Sequence[Fact]) -> AggregateStatistics:
        if not facts:
            return AggregateStatistics()

        categories = self._category_statistics(facts)
        total_fitness = sum(fact.fitness for fact in facts)
        mean_fitness = total_fitness / len(facts)

        # sorted() is stable, so equal averages keep first-seen order
        ranking = [
            stats.category_id for stats in sorted(categories.values(), key=lambda stats: -stats.average_fitness)
        ]

        return AggregateStatistics(
            total_facts=len(facts),
            mean_fitness=mean_fitness,
            overall_coherence=mean_fitness * self._settings.coherence_scale,
            validation_ratio=_ratio(sum(1 for fact in facts if fact.validated), len(facts)),
            external_validation_ratio=_ratio(sum(1 for fact in facts if fact.externally_validated), len(facts)),
            categories=categories,
            formats=self._format_statistics(facts),
            ranking=ranking,
            progression_chains=self.progression_chains(facts),
            cross_references=self.cross_references(facts),
        )

    @staticmethod
    def _category_statistics(facts: Sequence[Fact]) -> Dict[str, CategoryStatistics]:
        categories: Dict[str, CategoryStatistics] = {}
        for fact in facts:
            if fact.category_id is None:
                continue
            stats = categories.get(fact.category_id)
            if stats is None:
                stats = CategoryStatistics(category_id=fact.category_id, progression_rank=fact.progression_rank)
                categories[fact.category_id] = stats
            stats.count += 1
            stats.total_fitness += fact.fitness
            stats.validated += int(fact.validated)
            stats.externally_validated += int(fact.externally_validated)

        for stats in categories.values():
            stats.average_fitness = stats.total_fitness / stats.count
            stats.validation_ratio = _ratio(stats.validated, stats.count)
            stats.external_validation_ratio = _ratio(stats.externally_validated, stats.count)
        return categories

    @staticmethod
    def _format_statistics(facts: Sequence[Fact]) -> Dict[str, FormatStatistics]:
        formats: Dict[str, FormatStatistics] = {}
        for fact in facts:
            stats = formats.setdefault(fact.format_tag, FormatStatistics(format_tag=fact.format_tag))
            stats.count += 1
            stats.total_fitness += fact.fitness
            stats.validated += int(fact.validated)

        for stats in formats.values():
            stats.average_fitness = stats.total_fitness / stats.count
            stats.validation_ratio = _ratio(stats.validated, stats.count)
        return formats

    def progression_chains(self, facts: Sequence[Fact]) -> List[ProgressionChain]:
        """Chains between adjacent progression ranks that both hold facts."""
        concepts_by_rank: Dict[int, set] = defaultdict(set)
        for fact in facts:
            if fact.progression_rank > 0:
                concepts_by_rank[fact.progression_rank].add(fact.object)

        chains: List[ProgressionChain] = []
        for rank in sorted(concepts_by_rank):
            if rank + 1 not in concepts_by_rank:
                continue
            from_count = len(concepts_by_rank[rank])
            to_count = len(concepts_by_rank[rank + 1])
            chains.append(
                ProgressionChain(
                    from_rank=rank,
                    to_rank=rank + 1,
                    from_count=from_count,
                    to_count=to_count,
                    strength=min(from_count, to_count),
                    chain_type="mathematical" if rank <= self._settings.mathematical_rank_limit else "scientific",
                )
            )
        return chains

    def cross_references(self, facts: Sequence[Fact]) -> List[CrossReference]:
        """Validated concepts that occur in more than one document, best average fitness first."""
        groups: Dict[str, List[Fact]] = defaultdict(list)
        for fact in facts:
            if (fact.validated or fact.externally_validated) and fact.document is not None:
                groups[fact.object].append(fact)

        references: List[CrossReference] = []
        for concept, members in groups.items():
            documents = sorted({fact.document for fact in members if fact.document is not None})
            if len(documents) < 2:
                continue
            categories = list(dict.fromkeys(fact.category_id for fact in members if fact.category_id is not None))
            references.append(
                CrossReference(
                    concept=concept,
                    documents=documents,
                    categories=categories,
                    strength=len(members),
                    average_fitness=sum(fact.fitness for fact in members) / len(members),
                    cross_category=len(categories) > 1,
                )
            )

        references.sort(key=lambda reference: (-reference.average_fitness, reference.concept))
        return references[: self._settings.max_cross_references]
