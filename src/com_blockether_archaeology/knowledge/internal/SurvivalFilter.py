"""
Fitness scoring and neighbor-count selection.
"""

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .ConnectionGraphBuilder import ConnectionGraphBuilder
from .KnowledgeArchaeologySettings import GenerationMode, ScoringTable, SurvivalSettings
from .KnowledgeArchaeologyTypes import Fact

logger = logging.getLogger(__name__)


class FitnessScorer:
    """Computes fitness from a declarative scoring table."""

    def __init__(self, table: Optional[ScoringTable] = None):
        self._table = table or ScoringTable()

    @property
    def table(self) -> ScoringTable:
        return self._table

    def bonus_product(self, fact: Fact) -> float:
        """
        Base fitness times every neighbor-independent bonus.

        Depends only on the fact's category, validation flags and format, on
        top of its extraction-time base fitness.
        """
        product = fact.fitness * self._table.category_multiplier(fact.category_id)
        if fact.validated:
            product *= self._table.corroboration_multiplier
        if fact.externally_validated:
            product *= self._table.external_validation_multiplier
        product *= self._table.format_multiplier(fact.format_tag)
        return product

    def final_fitness(self, bonus_product: float, neighbor_count: int) -> float:
        return self._table.clip(bonus_product * self._table.selection_multiplier(neighbor_count))

    def survives(self, fitness: float) -> bool:
        return fitness > self._table.survival_threshold


class SurvivalOutcome(BaseModel):
    survivors: List[Fact] = Field(default_factory=list, description="Facts above the threshold, in input order")
    discarded: List[Fact] = Field(default_factory=list, description="Facts culled, with their final fitness")
    generations: int = Field(default=0, description="Selection generations run")


class SurvivalFilter:
    """
    Scores a raw fact population and culls it.

    The default mode runs exactly one generation. In fixed_point mode,
    neighbor counts are recomputed among the survivors of the previous
    generation until nothing more is culled or max_generations is reached;
    bonus products are computed once from the raw facts.
    """

    def __init__(
        self,
        scorer: Optional[FitnessScorer] = None,
        settings: Optional[SurvivalSettings] = None,
        graph: Optional[ConnectionGraphBuilder] = None,
    ):
        self._scorer = scorer or FitnessScorer()
        self._settings = settings or SurvivalSettings()
        self._graph = graph or ConnectionGraphBuilder()

    def apply(self, facts: Sequence[Fact]) -> SurvivalOutcome:
        population = list(facts)
        bonuses = [self._scorer.bonus_product(fact) for fact in population]
        max_generations = 1 if self._settings.mode == GenerationMode.SINGLE else self._settings.max_generations

        discarded: List[Fact] = []
        survivors: List[Fact] = []
        generation = 0
        while generation < max_generations:
            generation += 1
            counts = self._graph.count_neighbors(population)
            survivors, survivor_bonuses = [], []
            for fact, bonus, count in zip(population, bonuses, counts):
                scored = fact.model_copy(
                    update={
                        "fitness": self._scorer.final_fitness(bonus, count),
                        "connections": count,
                        "generation": generation,
                    }
                )
                if self._scorer.survives(scored.fitness):
                    survivors.append(scored)
                    survivor_bonuses.append(bonus)
                else:
                    discarded.append(scored)

            logger.debug(f"Generation {generation}: {len(survivors)} of {len(population)} facts survived")
            if not survivors or len(survivors) == len(population):
                break
            population, bonuses = survivors, survivor_bonuses

        logger.info(f"Survival filter kept {len(survivors)} of {len(facts)} facts after {generation} generation(s)")
        return SurvivalOutcome(survivors=survivors, discarded=discarded, generations=generation)
