"""
Workspace for ArchiFinance

This module ties the pure calculators to the persisted dataset. It owns
the in-memory copies of the three documents (projects, general fund,
settings) and is the only place that writes them.

DESIGN DECISION: The workspace enforces the boundaries:
- Every write goes to storage first; memory is updated only on success
- Every write reports a ChangeEvent to the mutation gate
- Anything that discards the project collection needs confirmation

Reads are always computed from the current records; nothing derived is
cached across writes.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel

from archifinance.calculations.quote import contract_total
from archifinance.config import get_settings
from archifinance.errors import (
    ExportError,
    ProjectNotFoundError,
    SettingsError,
    SyncError,
    TransactionNotFoundError,
)
from archifinance.invoicing.builder import InvoiceBuilder, edit_saved_invoice
from archifinance.ledger.aggregator import (
    FirmLedgerSummary,
    LedgerEntry,
    LedgerView,
    ProjectFinancials,
    firm_ledger_summary,
    project_financials,
    unified_ledger,
)
from archifinance.ledger.categories import CategoryTable
from archifinance.models.events import ChangeEvent, ChangeEventBuilder, ChangeEventType
from archifinance.models.firm import FirmSettings
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Cost, Project, QuoteData, create_empty_project
from archifinance.models.validation import ValidationResult
from archifinance.queries.projects import ProjectCard, ProjectQuery, project_cards, toggle_archive
from archifinance.reports.rollup import RollupReport, build_rollup
from archifinance.services.backup import (
    ImportKind,
    ImportPlan,
    backup_filename,
    build_backup,
    dumps_document,
    parse_import,
    project_filename,
)
from archifinance.services.storage import DatasetStorageInterface, JsonFileStorage, StorageError
from archifinance.services.sync import fetch_server_projects
from archifinance.tracking.gate import MutationGate, get_gate
from archifinance.tracking.logger import get_logger
from archifinance.validation.validator import QuoteValidator


ConfirmCallback = Callable[[ImportPlan], bool]
ProjectFetcher = Callable[[], list[Project]]


class ImportOutcome(BaseModel):
    """What an import did to the dataset."""

    kind: ImportKind
    applied: bool
    project_count: int = 0
    replaced_existing: bool = False


class Workspace:
    """
    The loaded dataset and every write path into it.

    Usage:
        workspace = Workspace.load()
        project = workspace.create_project()
        workspace.add_cost(project.id, Cost(description="Plot plan", amount=3000))
        path = workspace.export_full_backup()
    """

    def __init__(
        self,
        storage: DatasetStorageInterface,
        gate: Optional[MutationGate] = None,
        projects: Optional[list[Project]] = None,
        general_fund: Optional[list[GeneralTransaction]] = None,
        settings: Optional[FirmSettings] = None,
    ):
        self._storage = storage
        self._gate = gate or get_gate()
        self._projects: list[Project] = list(projects or [])
        self._general_fund: list[GeneralTransaction] = list(general_fund or [])
        self._settings: FirmSettings = settings or FirmSettings()
        self._validator = QuoteValidator()
        self._logger = get_logger(__name__)

    @classmethod
    def load(
        cls,
        storage: Optional[DatasetStorageInterface] = None,
        gate: Optional[MutationGate] = None,
    ) -> "Workspace":
        """
        Read all three documents and start with a clean gate.

        Raises:
            StorageError: If a stored document is unreadable
        """
        storage = storage or JsonFileStorage()
        gate = gate or get_gate()
        workspace = cls(
            storage,
            gate=gate,
            projects=storage.load_projects(),
            general_fund=storage.load_general_fund(),
            settings=storage.load_settings(),
        )
        gate.reset()
        workspace._logger.info(
            "workspace_loaded",
            project_count=len(workspace._projects),
            transaction_count=len(workspace._general_fund),
        )
        return workspace

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def general_fund(self) -> list[GeneralTransaction]:
        return list(self._general_fund)

    @property
    def settings(self) -> FirmSettings:
        return self._settings

    @property
    def gate(self) -> MutationGate:
        return self._gate

    @property
    def needs_export(self) -> bool:
        return self._gate.needs_export

    def get_project(self, project_id: str) -> Project:
        """
        Raises:
            ProjectNotFoundError: If no project has this id
        """
        for project in self._projects:
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(f"Project not found: {project_id}")

    # =========================================================================
    # PROJECTS
    # =========================================================================

    def create_project(self, project: Optional[Project] = None) -> Project:
        """Add a project at the top of the list (a seeded one by default)."""
        project = project or create_empty_project()
        self._save_projects(
            [project, *self._projects],
            ChangeEventBuilder.project_created(project.id, project.name),
        )
        return project

    def update_project(self, project: Project) -> Project:
        """
        Replace a project by id, stamping lastModified.

        Raises:
            ProjectNotFoundError: If no project has this id
        """
        self.get_project(project.id)
        updated = project.touched()
        self._save_projects(
            [updated if p.id == updated.id else p for p in self._projects],
            ChangeEventBuilder.project_updated(updated.id, updated.name),
        )
        return updated

    def delete_project(self, project_id: str) -> None:
        self.get_project(project_id)
        self._save_projects(
            [p for p in self._projects if p.id != project_id],
            ChangeEventBuilder.project_deleted(project_id),
        )

    def toggle_archive(self, project_id: str) -> Project:
        return self.update_project(toggle_archive(self.get_project(project_id)))

    def update_quote(self, project_id: str, quote: QuoteData) -> Project:
        project = self.get_project(project_id)
        return self.update_project(project.model_copy(update={"quote": quote}))

    # ---- costs ----

    def add_cost(self, project_id: str, cost: Cost) -> Project:
        """Newest costs go first."""
        project = self.get_project(project_id)
        return self.update_project(project.model_copy(update={"costs": [cost, *project.costs]}))

    def update_cost(self, project_id: str, cost: Cost) -> Project:
        project = self.get_project(project_id)
        costs = [cost if c.id == cost.id else c for c in project.costs]
        return self.update_project(project.model_copy(update={"costs": costs}))

    def delete_cost(self, project_id: str, cost_id: str) -> Project:
        project = self.get_project(project_id)
        costs = [c for c in project.costs if c.id != cost_id]
        return self.update_project(project.model_copy(update={"costs": costs}))

    # ---- invoices ----

    def invoice_builder(self, project_id: str, today: Optional[date] = None) -> InvoiceBuilder:
        """A fresh draft slot for the project's invoice editor."""
        prefix = get_settings().app.invoice_number_prefix
        return InvoiceBuilder(self.get_project(project_id), today=today, invoice_prefix=prefix)

    def commit_invoice(self, builder: InvoiceBuilder) -> Project:
        """
        Save the builder's draft into the project history and persist it.

        The invoice is appended to the stored project, not to the snapshot
        the builder was opened on, so writes made in between are kept.
        """
        current = self.get_project(builder.project.id)
        return self.update_project(builder.commit(onto=current))

    def edit_saved_invoice(self, project_id: str, invoice_id: str, **fields) -> Project:
        """
        Raises:
            InvoiceNotFoundError: If the project has no saved invoice with this id
        """
        project = self.get_project(project_id)
        return self.update_project(edit_saved_invoice(project, invoice_id, **fields))

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def save_settings(self, settings: FirmSettings) -> FirmSettings:
        self._storage.save_settings(settings)
        self._settings = settings
        self._gate.record(ChangeEventBuilder.settings_saved())
        return settings

    def remove_bank_account(self, account_id: str) -> FirmSettings:
        """
        Raises:
            SettingsError: If this is the last remaining account
        """
        accounts = self._settings.bank_accounts
        if len(accounts) <= 1:
            raise SettingsError("At least one bank account must remain")
        remaining = [acc for acc in accounts if acc.id != account_id]
        return self.save_settings(self._settings.model_copy(update={"bank_accounts": remaining}))

    # =========================================================================
    # GENERAL FUND
    # =========================================================================

    def add_transaction(self, transaction: GeneralTransaction) -> GeneralTransaction:
        self._save_general_fund(
            [transaction, *self._general_fund],
            ChangeEventBuilder.transaction_changed(
                ChangeEventType.TRANSACTION_ADDED, transaction.id, transaction.amount
            ),
        )
        return transaction

    def get_transaction(self, transaction_id: str) -> GeneralTransaction:
        """
        Raises:
            TransactionNotFoundError: If no general fund row has this id
        """
        for transaction in self._general_fund:
            if transaction.id == transaction_id:
                return transaction
        raise TransactionNotFoundError(f"Transaction not found: {transaction_id}")

    def update_transaction(self, transaction: GeneralTransaction) -> GeneralTransaction:
        self.get_transaction(transaction.id)
        self._save_general_fund(
            [transaction if t.id == transaction.id else t for t in self._general_fund],
            ChangeEventBuilder.transaction_changed(
                ChangeEventType.TRANSACTION_UPDATED, transaction.id, transaction.amount
            ),
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        self.get_transaction(transaction_id)
        self._save_general_fund(
            [t for t in self._general_fund if t.id != transaction_id],
            ChangeEventBuilder.transaction_changed(ChangeEventType.TRANSACTION_DELETED, transaction_id),
        )

    # =========================================================================
    # IMPORT / EXPORT / SYNC
    # =========================================================================

    def import_text(self, text: str, confirm: ConfirmCallback) -> ImportOutcome:
        """
        Apply an imported document.

        `confirm` is asked before the collection is discarded (full backup,
        legacy array) and before an existing project is overwritten by a
        single-project import. A declined confirmation changes nothing.

        Raises:
            ParseFailedError: If the text is not JSON
            InvalidFormatError: If the JSON is not an importable shape
            StorageError: If the dataset could not be written (nothing replaced)
        """
        plan = parse_import(text)

        if plan.replaces_collection:
            if not confirm(plan):
                self._logger.info("import_declined", kind=plan.kind.value)
                return ImportOutcome(kind=plan.kind, applied=False)
            self._restore(plan)
            return ImportOutcome(kind=plan.kind, applied=True, project_count=len(plan.projects))

        imported = plan.project
        exists = any(p.id == imported.id for p in self._projects)
        if exists:
            if not confirm(plan):
                self._logger.info("import_declined", kind=plan.kind.value, project_id=imported.id)
                return ImportOutcome(kind=plan.kind, applied=False)
            projects = [imported if p.id == imported.id else p for p in self._projects]
        else:
            projects = [imported, *self._projects]

        self._save_projects(
            projects,
            ChangeEventBuilder.project_imported(imported.id, imported.name, replaced=exists),
        )
        return ImportOutcome(kind=plan.kind, applied=True, project_count=1, replaced_existing=exists)

    def export_full_backup(self, now: Optional[datetime] = None) -> Path:
        """
        Write the whole dataset as one backup file and clear the flag.

        Raises:
            ExportError: If the file could not be written (flag unchanged)
        """
        now = now or datetime.now()
        document = build_backup(
            self._projects,
            self._general_fund,
            version=get_settings().app.backup_version,
            exported_at=now,
        )
        try:
            path = self._storage.write_export(backup_filename(now), dumps_document(document.to_document()))
        except StorageError as e:
            self._logger.error("backup_export_failed", error=str(e))
            raise ExportError(f"Full backup export failed: {e}") from e

        self._gate.mark_clean(ChangeEventBuilder.backup_exported(str(path), len(self._projects)))
        return path

    def export_project(self, project_id: str, today: Optional[date] = None) -> Path:
        """
        Write one project as a bare JSON file. The flag is not touched.

        Raises:
            ExportError: If the file could not be written
        """
        project = self.get_project(project_id)
        try:
            path = self._storage.write_export(
                project_filename(project, today),
                dumps_document(project.to_document()),
            )
        except StorageError as e:
            self._logger.error("project_export_failed", project_id=project_id, error=str(e))
            raise ExportError(f"Project export failed: {e}") from e

        self._logger.info("project_exported", project_id=project_id, path=str(path))
        return path

    def sync_from_server(self, fetcher: Optional[ProjectFetcher] = None) -> list[Project]:
        """
        Replace the project collection with the server copy.

        Raises:
            SyncError: If the pull or the local save fails (state unchanged)
        """
        fetcher = fetcher or fetch_server_projects
        projects = fetcher()
        try:
            self._storage.save_projects(projects)
        except StorageError as e:
            self._logger.error("server_sync_save_failed", error=str(e))
            raise SyncError(f"Could not store server projects: {e}") from e

        self._projects = list(projects)
        self._gate.mark_clean(ChangeEventBuilder.server_synced(len(projects)))
        return self.projects

    # =========================================================================
    # READS
    # =========================================================================

    def transaction_categories(self) -> CategoryTable:
        return CategoryTable.for_transactions(self._settings)

    def project_financials(self, project_id: str) -> ProjectFinancials:
        return project_financials(self.get_project(project_id))

    def contract_total(self, project_id: str) -> float:
        return contract_total(self.get_project(project_id).quote)

    def validate_quote(self, project_id: str) -> ValidationResult:
        return self._validator.validate(self.get_project(project_id).quote)

    def project_cards(self, query: Optional[ProjectQuery] = None) -> list[ProjectCard]:
        return project_cards(self._projects, query or ProjectQuery())

    def ledger_summary(self) -> FirmLedgerSummary:
        return firm_ledger_summary(self._general_fund, self._projects)

    def unified_ledger(self, view: LedgerView = LedgerView.ALL) -> list[LedgerEntry]:
        return unified_ledger(self._projects, self._general_fund, self.transaction_categories(), view)

    def rollup(self, months: Optional[int] = None) -> RollupReport:
        return build_rollup(self._projects, self._general_fund, months)

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _restore(self, plan: ImportPlan) -> None:
        """
        Replace both collections, or neither.

        If the projects write fails after the general fund was written, the
        previous general fund document is put back before re-raising.
        """
        if plan.general_fund is not None:
            self._storage.save_general_fund(plan.general_fund)
        try:
            self._storage.save_projects(plan.projects)
        except StorageError as e:
            self._logger.error("backup_restore_failed", kind=plan.kind.value, error=str(e))
            if plan.general_fund is not None:
                self._storage.save_general_fund(self._general_fund)
            raise

        if plan.general_fund is not None:
            self._general_fund = list(plan.general_fund)
        self._projects = list(plan.projects)
        self._gate.mark_clean(ChangeEventBuilder.backup_restored(len(plan.projects), plan.kind.value))

    def _save_projects(self, projects: list[Project], event: ChangeEvent) -> None:
        self._storage.save_projects(projects)
        self._projects = projects
        self._gate.record(event)

    def _save_general_fund(self, transactions: list[GeneralTransaction], event: ChangeEvent) -> None:
        self._storage.save_general_fund(transactions)
        self._general_fund = transactions
        self._gate.record(event)
