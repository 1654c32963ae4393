"""Eight-phase research pipeline."""

import logging
import time
from typing import Any

from deep_research.data import (
    Importance,
    Priority,
    ResearchResult,
    ResearchStats,
    SourceEvaluation,
    SubQuestion,
    SubQuestionCategory,
)
from deep_research.evaluation.base import Evaluator
from deep_research.gaps.base import GapFinder
from deep_research.query.base import QueryDecomposer
from deep_research.retrieval.base import Retriever
from deep_research.run_logger import RunLogger
from deep_research.search.base import Searcher
from deep_research.search.parallel import flatten_results
from deep_research.synthesis.synthesizer import Synthesizer
from deep_research.verification.cross_reference import CrossReferencer

logger = logging.getLogger(__name__)

FOLLOW_UP_RESULTS_PER_QUERY = 3
FOLLOW_UP_MAX_PAGES = 5


class DeepResearchEngine:
    """Answer a question by decomposing, searching, reading and synthesizing.

    Flow:
    1. Decompose the question into sub-questions
    2. Search every sub-question (up to ``max_sub_questions``)
    3. Retrieve the distinct result pages
    4. Score pages and extract validated facts
    5. Ask the model for missing or conflicting information
    6. If there are a few critical gaps, search, retrieve and evaluate once more
    7. Merge facts across sources
    8. Write the cited answer

    Partial failures inside a phase shrink the result; anything else aborts
    the run and propagates.

    Args:
        decomposer: Sub-question planner.
        searcher: Batch searcher.
        retriever: Page retriever.
        evaluator: Source evaluator.
        gap_analyzer: Gap finder.
        cross_referencer: Fact merger.
        synthesizer: Answer writer.
        max_sub_questions: Sub-questions searched in the primary round.
        max_searches_per_question: Results kept per sub-question.
        max_pages_to_fetch: Pages retrieved in the primary round.
        max_follow_up_searches: Most critical gaps that still trigger a
            follow-up round.
        run_logger: Optional RunLogger for intermediate result logging.
    """

    def __init__(
        self,
        *,
        decomposer: QueryDecomposer,
        searcher: Searcher,
        retriever: Retriever,
        evaluator: Evaluator,
        gap_analyzer: GapFinder,
        cross_referencer: CrossReferencer,
        synthesizer: Synthesizer,
        max_sub_questions: int = 8,
        max_searches_per_question: int = 3,
        max_pages_to_fetch: int = 20,
        max_follow_up_searches: int = 5,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._decomposer = decomposer
        self._searcher = searcher
        self._retriever = retriever
        self._evaluator = evaluator
        self._gap_analyzer = gap_analyzer
        self._cross_referencer = cross_referencer
        self._synthesizer = synthesizer
        self._max_sub_questions = max_sub_questions
        self._max_searches = max_searches_per_question
        self._max_pages = max_pages_to_fetch
        self._max_follow_ups = max_follow_up_searches
        self._run_logger = run_logger

    def _finish_phase(
        self,
        stats: ResearchStats,
        name: str,
        started: float,
        items: int,
        component: Any,
        input_data: Any = None,
        output_data: Any = None,
    ) -> None:
        duration = time.monotonic() - started
        stats.record(name, duration * 1000, items)
        if self._run_logger:
            self._run_logger.log_phase(
                phase=name,
                component=type(component).__name__,
                input_data=input_data,
                output_data=output_data,
                items_processed=items,
                duration_seconds=duration,
            )

    async def research(self, question: str) -> ResearchResult:
        """Run every phase for ``question``.

        Returns:
            The cited answer with its sources, verified facts, gaps and stats.

        Raises:
            Exception: Any error a phase does not recover from. The run log,
                when enabled, is still written with the failure recorded.
        """
        run_start = time.monotonic()
        logger.info("Starting research for: %r", question[:100])
        if self._run_logger:
            self._run_logger.start_run(question)

        try:
            result = await self._run_phases(question)
        except Exception as e:
            logger.error("Research failed: %s", e)
            if self._run_logger:
                self._run_logger.fail_run(e)
            raise

        result.stats.total_time_ms = (time.monotonic() - run_start) * 1000
        logger.info(
            "Research complete in %.0fms: %d sources, %d verified facts, %s confidence",
            result.stats.total_time_ms,
            len(result.sources),
            len(result.verified_facts),
            result.confidence,
        )
        if self._run_logger:
            self._run_logger.finish_run(result)
        return result

    async def _run_phases(self, question: str) -> ResearchResult:
        stats = ResearchStats()

        # Phase 1: decomposition
        t0 = time.monotonic()
        sub_questions = await self._decomposer.decompose(question)
        self._finish_phase(
            stats, "decomposition", t0, len(sub_questions), self._decomposer,
            question, sub_questions,
        )  # fmt: skip

        # Phase 2: search
        t0 = time.monotonic()
        searched = sub_questions[: self._max_sub_questions]
        search_results = await self._searcher.search_all(searched, self._max_searches)
        all_results = flatten_results(search_results)
        self._finish_phase(
            stats, "search", t0, len(all_results), self._searcher, searched, all_results
        )

        # Phase 3: retrieval
        t0 = time.monotonic()
        contents = await self._retriever.retrieve_all(all_results, self._max_pages)
        self._finish_phase(
            stats, "retrieval", t0, len(contents), self._retriever,
            [r.url for r in all_results], [c.url for c in contents],
        )  # fmt: skip

        # Phase 4: evaluation
        t0 = time.monotonic()
        evaluations = await self._evaluator.evaluate_all(contents, sub_questions)
        total_facts = sum(len(e.extracted_facts) for e in evaluations)
        self._finish_phase(
            stats, "evaluation", t0, total_facts, self._evaluator,
            [c.url for c in contents], _evaluation_summary(evaluations),
        )  # fmt: skip

        # Phase 5: gap analysis
        t0 = time.monotonic()
        gaps = await self._gap_analyzer.analyze(question, sub_questions, evaluations)
        self._finish_phase(stats, "gap_analysis", t0, len(gaps), self._gap_analyzer, None, gaps)

        # Phase 6: follow-up round for a small number of critical gaps
        critical = [g for g in gaps if g.importance == Importance.CRITICAL]
        if 0 < len(critical) <= self._max_follow_ups:
            t0 = time.monotonic()
            logger.info("Running %d follow-up searches", len(critical))
            follow_ups = [
                SubQuestion(
                    id=f"followup_{i}",
                    question=gap.description,
                    category=SubQuestionCategory.FACTS,
                    priority=Priority.HIGH,
                    search_query=gap.suggested_query,
                )
                for i, gap in enumerate(critical)
            ]
            follow_up_results = flatten_results(
                await self._searcher.search_all(follow_ups, FOLLOW_UP_RESULTS_PER_QUERY)
            )
            follow_up_evaluations: list[SourceEvaluation] = []
            if follow_up_results:
                follow_up_contents = await self._retriever.retrieve_all(
                    follow_up_results, FOLLOW_UP_MAX_PAGES
                )
                follow_up_evaluations = await self._evaluator.evaluate_all(
                    follow_up_contents, follow_ups
                )
                evaluations.extend(follow_up_evaluations)
            self._finish_phase(
                stats, "follow_up", t0, len(follow_up_results), self,
                follow_ups, _evaluation_summary(follow_up_evaluations),
            )  # fmt: skip

        # Phase 7: verification
        t0 = time.monotonic()
        verified = self._cross_referencer.verify(evaluations)
        self._finish_phase(
            stats, "verification", t0, len(verified), self._cross_referencer, None, verified
        )

        # Phase 8: synthesis (records its own phase)
        stats.total_searches = len(all_results)
        stats.pages_analyzed = len(contents)
        stats.facts_extracted = total_facts
        stats.facts_verified = len(verified)
        result = await self._synthesizer.synthesize(question, verified, gaps, stats)
        if self._run_logger and result.stats.phases:
            synthesis = result.stats.phases[-1]
            self._run_logger.log_phase(
                phase=synthesis.name,
                component=type(self._synthesizer).__name__,
                input_data=None,
                output_data=result.response,
                items_processed=synthesis.items_processed,
                duration_seconds=synthesis.duration_ms / 1000,
            )
        return result


def _evaluation_summary(evaluations: list[SourceEvaluation]) -> list[dict[str, Any]]:
    return [
        {
            "url": e.url,
            "overall_score": e.overall_score,
            "facts": [f.claim for f in e.extracted_facts],
        }
        for e in evaluations
    ]
