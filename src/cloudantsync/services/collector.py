"""Fan-in barrier for concurrent phase results."""

import queue
from typing import List

from cloudantsync.errors import PhaseError
from cloudantsync.models import OperationResult


class ResultCollector:
    """Receives exactly ``expected`` results, reports each, then decides the phase outcome.

    Nothing is cancelled when a result carries an error: every task is
    allowed to finish so all failures in the phase get reported.
    """

    def __init__(self, logger, console):
        self.logger = logger
        self.console = console

    def collect(
        self,
        inbox: "queue.Queue[OperationResult]",
        expected: int,
        phase: str,
    ) -> List[OperationResult]:
        results: List[OperationResult] = []
        for _ in range(expected):
            result = inbox.get()
            self.report(result)
            results.append(result)

        failures = [result for result in results if not result.ok]
        if failures:
            raise PhaseError(phase, failures, total=expected, results=results)
        return results

    def report(self, result: OperationResult):
        label = result.status or "no response"
        if result.skipped:
            self.console.print(f"  [yellow]-[/yellow] {result.operation} skipped: {result.error}")
            self.logger.warning("%s skipped: %s", result.operation, result.error)
        elif result.ok:
            self.console.print(f"  [green]✓[/green] {result.operation} {label} [dim]{result.endpoint}[/dim]")
            self.logger.info("%s %s %s", result.operation, label, result.url)
        else:
            self.console.print(f"  [red]✗[/red] {result.operation} {label}: {result.error}")
            self.logger.error("%s %s: %s", result.operation, label, result.error)

        if result.body:
            self.logger.debug("Response body: %s", result.body.strip())
