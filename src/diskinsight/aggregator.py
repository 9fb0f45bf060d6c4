"""Runs every available analyzer and merges their findings."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from diskinsight.analyzers import InsightAnalyzer, build_analyzers
from diskinsight.cancellation import CancellationToken, OperationCancelled
from diskinsight.config import load_settings
from diskinsight.models import AnalysisProgress, AnalysisResult, Insight

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[AnalysisProgress], None]

COMPLETE = "Complete"
UNKNOWN_LOCATION = "Unknown"

_DRIVE_PATH = re.compile(r"^([A-Za-z]:)(?:[\\/]+([^\\/]+))?")


def get_location_key(path: str) -> str:
    """
    Map an insight path to its grouping key.

    Rooted paths group by root plus first segment (``C:\\Users``, ``/home``);
    anything else, such as the synthetic ``docker images``, is its own key.
    """
    if not path:
        return UNKNOWN_LOCATION

    match = _DRIVE_PATH.match(path)
    if match:
        drive, segment = match.groups()
        return f"{drive}\\{segment}" if segment else drive

    if path.startswith("/"):
        parts = [p for p in path.split("/") if p]
        return f"/{parts[0]}" if parts else "/"

    return path


def group_by_location(insights: Iterable[Insight]) -> dict[str, list[Insight]]:
    """Group insights by location key, each group sorted by size descending."""
    grouped: dict[str, list[Insight]] = {}
    for insight in insights:
        grouped.setdefault(get_location_key(insight.path), []).append(insight)

    for key, items in grouped.items():
        grouped[key] = sorted(items, key=lambda i: i.size_in_bytes, reverse=True)
    return grouped


class InsightAggregator:
    """Orchestrates analyzers under one cancellation token.

    Analyzers run in registration order (or concurrently when
    ``max_workers > 1``); findings are always merged in registration order.
    One analyzer failing is recorded in ``AnalysisResult.errors`` and does not
    stop the others. Cancellation aborts the whole run.
    """

    def __init__(
        self,
        analyzers: Optional[Sequence[InsightAnalyzer]] = None,
        max_workers: int = 1,
    ) -> None:
        self._analyzers = list(analyzers) if analyzers is not None else build_analyzers(load_settings())
        self._max_workers = max(1, max_workers)

        names = [a.name for a in self._analyzers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate analyzer names: {', '.join(duplicates)}")

    @property
    def analyzers(self) -> tuple[InsightAnalyzer, ...]:
        return tuple(self._analyzers)

    def available_analyzers(self) -> list[InsightAnalyzer]:
        """Analyzers whose capability probe succeeds right now."""
        available = []
        for analyzer in self._analyzers:
            try:
                ok = analyzer.is_available
            except Exception:
                logger.warning("Availability check failed for %s", analyzer.name, exc_info=True)
                ok = False
            if ok:
                available.append(analyzer)
            else:
                logger.debug("Analyzer not available: %s", analyzer.name)
        return available

    def analyze_all(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> AnalysisResult:
        """
        Run all available analyzers and collect their insights.

        Args:
            progress_callback: Called once before each analyzer starts and once
                with "Complete" at the end, on the thread running the scan
            token: Shared cancellation token

        Returns:
            Merged AnalysisResult

        Raises:
            OperationCancelled: If the token is cancelled before or during the run
        """
        token = token or CancellationToken()
        token.raise_if_cancelled()

        available = self.available_analyzers()
        logger.info("Running %d of %d analyzers", len(available), len(self._analyzers))

        if self._max_workers > 1 and len(available) > 1:
            outcomes = self._run_concurrently(available, progress_callback, token)
        else:
            outcomes = self._run_sequentially(available, progress_callback, token)

        result = AnalysisResult()
        for analyzer, insights, error in outcomes:
            if error is not None:
                result.errors.append(f"{analyzer.name}: {error}")
                continue
            result.by_analyzer[analyzer.name] = insights
            result.all_insights.extend(insights)

        total = len(available)
        _report(progress_callback, COMPLETE, total, total)
        logger.info(
            "Analysis complete: %d insights, %d errors",
            result.total_insight_count,
            len(result.errors),
        )
        return result

    def start(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> Future[AnalysisResult]:
        """Run analyze_all on a background worker and return its future."""
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="diskinsight")
        try:
            return executor.submit(self.analyze_all, progress_callback, token)
        finally:
            executor.shutdown(wait=False)

    def _run_sequentially(
        self,
        available: list[InsightAnalyzer],
        progress_callback: Optional[ProgressCallback],
        token: CancellationToken,
    ) -> list[tuple[InsightAnalyzer, list[Insight], Optional[str]]]:
        outcomes = []
        total = len(available)

        for completed, analyzer in enumerate(available):
            token.raise_if_cancelled()
            _report(progress_callback, analyzer.name, completed, total)
            outcomes.append(_run_one(analyzer, token))

        return outcomes

    def _run_concurrently(
        self,
        available: list[InsightAnalyzer],
        progress_callback: Optional[ProgressCallback],
        token: CancellationToken,
    ) -> list[tuple[InsightAnalyzer, list[Insight], Optional[str]]]:
        total = len(available)
        futures: list[Future] = []

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            try:
                for analyzer in available:
                    token.raise_if_cancelled()
                    completed = sum(1 for f in futures if f.done())
                    _report(progress_callback, analyzer.name, completed, total)
                    futures.append(executor.submit(_run_one, analyzer, token))

                return [future.result() for future in futures]
            except OperationCancelled:
                token.cancel()
                for future in futures:
                    future.cancel()
                raise


def _run_one(
    analyzer: InsightAnalyzer,
    token: CancellationToken,
) -> tuple[InsightAnalyzer, list[Insight], Optional[str]]:
    """Run one analyzer; failures other than cancellation become an error message."""
    try:
        insights = list(analyzer.analyze(token))
    except OperationCancelled:
        raise
    except Exception as e:
        logger.warning("Analyzer %s failed: %s", analyzer.name, e, exc_info=True)
        return analyzer, [], str(e)

    logger.debug("Analyzer %s produced %d insights", analyzer.name, len(insights))
    return analyzer, insights, None


def _report(
    progress_callback: Optional[ProgressCallback],
    name: str,
    completed: int,
    total: int,
) -> None:
    if progress_callback:
        progress_callback(
            AnalysisProgress(current_analyzer=name, completed_count=completed, total_count=total)
        )
