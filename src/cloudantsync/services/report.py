"""Run report generation service."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cloudantsync.models import OperationResult


class ReportService:
    """Collects per-phase outcomes and writes the sync report JSON."""

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "run_id": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "accounts": [],
            "databases": [],
            "phases": [],
            "error": None,
        }

    def start_run(self, run_id: str, accounts: List[Dict[str, str]], databases: List[str]):
        self.report["run_id"] = run_id
        self.report["status"] = "running"
        self.report["started_at"] = self._now()
        self.report["accounts"] = accounts
        self.report["databases"] = list(databases)
        self.write()

    def set_databases(self, databases: List[str]):
        self.report["databases"] = list(databases)
        self.write()

    def phase_started(self, name: str, expected: int):
        self.report["phases"].append(
            {
                "name": name,
                "status": "running",
                "expected": expected,
                "started_at": self._now(),
                "finished_at": None,
                "duration_seconds": None,
                "results": [],
                "error": None,
            }
        )
        self.write()

    def phase_finished(
        self,
        name: str,
        status: str,
        results: List[OperationResult],
        error: Optional[str] = None,
    ):
        for phase in reversed(self.report["phases"]):
            if phase["name"] == name and phase["status"] == "running":
                phase["status"] = status
                phase["finished_at"] = self._now()
                phase["results"] = [result.to_dict() for result in results]
                phase["error"] = error
                started_at = datetime.fromisoformat(phase["started_at"])
                finished_at = datetime.fromisoformat(phase["finished_at"])
                phase["duration_seconds"] = (finished_at - started_at).total_seconds()
                break
        self.write()

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.report_file:
            return

        directory = os.path.dirname(self.report_file) or "."
        temp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix="sync-report-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
