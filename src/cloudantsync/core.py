import logging
import queue
import uuid
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

import requests
from rich.console import Console

from .constants import DEFAULT_MAX_WORKERS, DEFAULT_REPORT_FILE, DEFAULT_TIMEOUT
from .errors import PhaseError, SyncError
from .errors_catalog import actionable_error
from .models import Account, OperationResult
from .services.catalog import DatabaseCatalogService
from .services.collector import ResultCollector
from .services.http import HttpRequestService
from .services.permissions import PermissionService
from .services.replication import ReplicationDocumentService, ordered_pairs
from .services.replicator import ReplicatorDatabaseService
from .services.report import ReportService
from .services.session import SessionService

console = Console()
logger = logging.getLogger("cloudantsync")

Task = Callable[[], List[OperationResult]]


class CloudantSync:
    """Sets up full-mesh continuous replication of databases across accounts.

    Phases run one after another; the work inside a phase runs concurrently
    and is gathered by a ``ResultCollector`` before the next phase starts.
    A failed phase is reported but never stops later phases, and sessions
    are always terminated.
    """

    def __init__(
        self,
        accounts: List[Account],
        databases: Optional[Sequence[str]] = None,
        all_databases: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
        report_file: Optional[str] = DEFAULT_REPORT_FILE,
        embed_credentials: bool = True,
        dry_run: bool = False,
        requests_module=requests,
    ):
        if not accounts:
            raise SyncError(actionable_error("no_accounts"))
        usernames = [account.username for account in accounts]
        for username in usernames:
            if usernames.count(username) > 1:
                raise SyncError(actionable_error("duplicate_username", username=username))

        self.accounts = list(accounts)
        self.databases = self._normalize_databases(databases)
        self.all_databases = all_databases
        if not self.databases and not self.all_databases:
            raise SyncError(actionable_error("no_databases"))
        if max_workers < 1:
            raise SyncError("max_workers must be at least 1.")

        self.max_workers = max_workers
        self.dry_run = dry_run
        self.run_id = uuid.uuid4().hex[:10]
        self.failed_phases: List[str] = []
        self._executor: Optional[ThreadPoolExecutor] = None

        self.http_service = HttpRequestService(
            logger=logger,
            requests_module=requests_module,
            timeout=timeout,
        )
        self.result_collector = ResultCollector(logger=logger, console=console)
        self.session_service = SessionService(self.http_service, logger=logger)
        self.catalog_service = DatabaseCatalogService(self.http_service, logger=logger)
        self.replicator_service = ReplicatorDatabaseService(self.http_service, logger=logger)
        self.permission_service = PermissionService(self.http_service, logger=logger)
        self.replication_service = ReplicationDocumentService(
            self.http_service,
            logger=logger,
            embed_credentials=embed_credentials,
        )
        self.report_service = ReportService(report_file=report_file, logger=logger)

    @staticmethod
    def _normalize_databases(databases: Optional[Sequence[str]]) -> List[str]:
        normalized: List[str] = []
        for name in databases or []:
            clean = str(name).strip()
            if clean and clean not in normalized:
                normalized.append(clean)
        return normalized

    def plan(self) -> List[Tuple[str, int]]:
        """Phase names with the number of calls each one makes."""
        count = len(self.accounts)
        steps = []
        pending_login = sum(1 for account in self.accounts if not account.cookie)
        if pending_login:
            steps.append(("open_sessions", pending_login))
        steps.append(("provision_replicator_databases", count))
        for db in self.databases:
            steps.append((f"share_permissions:{db}", 2 * count))
            steps.append((f"create_replications:{db}", count * (count - 1)))
        steps.append(("terminate_sessions", count))
        return steps

    def print_plan(self):
        console.print("[bold blue]Dry run: no requests will be sent.[/bold blue]")
        for account in self.accounts:
            console.print(f"  account [cyan]{account.username}[/cyan] ({account.endpoint})")
        if self.all_databases and not self.databases:
            console.print("  databases: [yellow]all user databases of the first account[/yellow]")
        for name, calls in self.plan():
            console.print(f"  {name}: {calls} request(s)")

    def _deliver(self, task: Task, slots: int, inbox: "queue.Queue[OperationResult]"):
        try:
            results = task()
        except Exception as exc:
            logger.exception("Unexpected error in task")
            results = [OperationResult(operation="TASK", error=f"Unexpected error: {exc}")] * slots
        for result in results:
            inbox.put(result)

    def _run_phase(self, name: str, title: str, tasks: List[Task], results_per_task: int = 1) -> bool:
        expected = len(tasks) * results_per_task
        console.print(f"\n[bold blue]{title}[/bold blue]\n")
        logger.debug("Phase %s: %s task(s), %s result(s) expected", name, len(tasks), expected)
        self.report_service.phase_started(name, expected)

        inbox: "queue.Queue[OperationResult]" = queue.Queue()
        for task in tasks:
            self._executor.submit(self._deliver, task, results_per_task, inbox)

        try:
            results = self.result_collector.collect(inbox, expected, name)
        except PhaseError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            self.failed_phases.append(name)
            self.report_service.phase_finished(name, "failed", exc.results, error=str(exc))
            return False

        self.report_service.phase_finished(name, "success", results)
        return True

    def open_sessions(self):
        pending = [account for account in self.accounts if not account.cookie]
        if not pending:
            return

        tasks = [partial(self._single, self.session_service.login, account) for account in pending]
        if not self._run_phase("open_sessions", "Opening sessions", tasks):
            failed = sum(1 for account in pending if not account.cookie)
            raise SyncError(actionable_error("login_failed", count=str(failed)))

    def resolve_databases(self):
        if self.databases or not self.all_databases:
            return

        self.databases = self.catalog_service.list_databases(self.accounts[0])
        if not self.databases:
            raise SyncError(actionable_error("no_databases"))
        self.report_service.set_databases(self.databases)
        console.print(f"[blue]Databases to replicate: {', '.join(self.databases)}[/blue]")

    def provision_replicator_databases(self) -> bool:
        tasks = [
            partial(self._single, self.replicator_service.provision, account)
            for account in self.accounts
        ]
        return self._run_phase("provision_replicator_databases", "Creating replicator databases", tasks)

    def share_database(self, db: str) -> bool:
        tasks = [
            partial(self.permission_service.share, db, account, self.accounts)
            for account in self.accounts
        ]
        return self._run_phase(
            f"share_permissions:{db}",
            f"Modifying database permissions for '{db}'",
            tasks,
            results_per_task=2,
        )

    def create_replication_documents(self, db: str) -> bool:
        tasks = [
            partial(self._single, self.replication_service.create, db, target, source)
            for target, source in ordered_pairs(self.accounts)
        ]
        return self._run_phase(
            f"create_replications:{db}",
            f"Creating replication documents for '{db}'",
            tasks,
        )

    def terminate_sessions(self) -> bool:
        active = [account for account in self.accounts if account.cookie]
        if not active:
            return True

        tasks = [partial(self._single, self.session_service.terminate, account) for account in active]
        return self._run_phase("terminate_sessions", "Deleting cookies", tasks)

    @staticmethod
    def _single(call, *args) -> List[OperationResult]:
        return [call(*args)]

    def _account_summary(self):
        return [{"endpoint": account.endpoint, "username": account.username} for account in self.accounts]

    def _sync(self):
        try:
            self.open_sessions()
            self.resolve_databases()
            self.provision_replicator_databases()
            for db in self.databases:
                self.share_database(db)
                self.create_replication_documents(db)
        finally:
            self.terminate_sessions()

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None

        if self.dry_run:
            self.print_plan()
            return 0

        try:
            logger.info("Starting cloudant-sync run %s", self.run_id)
            self.report_service.start_run(
                run_id=self.run_id,
                accounts=self._account_summary(),
                databases=self.databases,
            )

            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                self._executor = executor
                try:
                    self._sync()
                finally:
                    self._executor = None

            if self.failed_phases:
                report_error = f"Failed phases: {', '.join(self.failed_phases)}"
                console.print(f"\n[bold red]Finished with errors.[/bold red] {report_error}")
                logger.error(report_error)
                return exit_code

            console.print("\n[bold green]Databases are now synchronized across all accounts.[/bold green]")
            report_status = "success"
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            report_status = "aborted"
            report_error = "Operation cancelled by user."
            return exit_code
        except SyncError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            report_error = str(exc)
            return exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            report_error = str(exc)
            return exit_code
        finally:
            self.report_service.finalize(report_status, error=report_error)
