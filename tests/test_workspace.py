"""
Integration tests for the workspace.

Every test uses in-memory storage and its own mutation gate, so nothing
touches disk or leaks flag state between tests.
"""

import json
from datetime import date, datetime

import pytest

from archifinance.errors import (
    ExportError,
    InvalidFormatError,
    ProjectNotFoundError,
    SettingsError,
    SyncError,
    TransactionNotFoundError,
)
from archifinance.ledger.aggregator import LedgerView
from archifinance.models.firm import BankAccount, FirmSettings
from archifinance.models.ledger import GeneralTransaction, TransactionType
from archifinance.models.project import (
    Cost,
    PaymentTerm,
    Project,
    ProjectStatus,
    QuoteData,
    TaxMode,
)
from archifinance.services.backup import ImportKind
from archifinance.services.storage import InMemoryStorage, StorageError
from archifinance.tracking.gate import MutationGate
from archifinance.workspace import Workspace


def make_workspace(projects=None, general_fund=None, settings=None):
    storage = InMemoryStorage(projects=projects or [], general_fund=general_fund or [], settings=settings)
    return Workspace.load(storage, gate=MutationGate()), storage


def make_projects(*ids):
    return [Project(id=pid, name=f"Project {pid}") for pid in ids]


def approve(plan):
    return True


def decline(plan):
    return False


class TestWorkspaceLoading:
    """Tests for loading the dataset."""

    def test_load_reads_all_documents(self):
        """Test that projects, ledger and settings are loaded."""
        workspace, _ = make_workspace(
            projects=make_projects("a", "b"),
            general_fund=[GeneralTransaction(id="g1")],
        )
        assert [p.id for p in workspace.projects] == ["a", "b"]
        assert [t.id for t in workspace.general_fund] == ["g1"]
        assert workspace.settings.bank_accounts

    def test_load_starts_clean(self):
        """Test that a freshly loaded dataset has nothing to export."""
        gate = MutationGate(needs_export=True)
        Workspace.load(InMemoryStorage(), gate=gate)
        assert not gate.needs_export


class TestProjectWrites:
    """Tests for project, cost and invoice writes."""

    def test_create_prepends_and_marks_dirty(self):
        """Test that new projects go to the top of the list."""
        workspace, storage = make_workspace(projects=make_projects("a"))
        project = workspace.create_project()
        assert workspace.projects[0].id == project.id
        assert storage.load_projects()[0].id == project.id
        assert workspace.needs_export

    def test_update_stamps_last_modified(self):
        """Test that updates replace by id and touch the timestamp."""
        workspace, _ = make_workspace(projects=[Project(id="a", name="Old", last_modified=0)])
        updated = workspace.update_project(workspace.get_project("a").model_copy(update={"name": "New"}))
        assert updated.last_modified > 0
        assert workspace.get_project("a").name == "New"

    def test_update_unknown_project(self):
        """Test that updating a missing project is an error."""
        workspace, _ = make_workspace()
        with pytest.raises(ProjectNotFoundError):
            workspace.update_project(Project(id="missing"))

    def test_delete_project(self):
        """Test project removal."""
        workspace, storage = make_workspace(projects=make_projects("a", "b"))
        workspace.delete_project("a")
        assert [p.id for p in storage.load_projects()] == ["b"]

    def test_toggle_archive(self):
        """Test archiving through the workspace."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        assert workspace.toggle_archive("a").status == ProjectStatus.ARCHIVED

    def test_cost_writes(self):
        """Test add (prepended), update and delete of costs."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        workspace.add_cost("a", Cost(id="c1", amount=100))
        workspace.add_cost("a", Cost(id="c2", amount=200))
        assert [c.id for c in workspace.get_project("a").costs] == ["c2", "c1"]

        workspace.update_cost("a", Cost(id="c1", amount=150))
        workspace.delete_cost("a", "c2")
        costs = workspace.get_project("a").costs
        assert [(c.id, c.amount) for c in costs] == [("c1", 150)]
        assert workspace.project_financials("a").cost == 150

    def test_invoice_flow(self):
        """Test the 1,200,000 / 30% / wht10 billing scenario end to end."""
        project = Project(
            id="a",
            name="Villa",
            tax_mode=TaxMode.WHT10,
            quote=QuoteData(
                custom_real_total=1200000,
                payment_terms=[PaymentTerm(id="t1", description="Deposit", percentage=30)],
            ),
        )
        workspace, storage = make_workspace(projects=[project])

        builder = workspace.invoice_builder("a", today=date(2024, 3, 1))
        builder.select_term("t1")
        saved = workspace.commit_invoice(builder)

        invoice = saved.invoices[0]
        assert invoice.total_service == 360000
        assert storage.load_projects()[0].invoices[0].total_service == 360000
        assert workspace.project_financials("a").revenue == 360000
        assert workspace.needs_export

    def test_edit_saved_invoice(self):
        """Test editing a frozen invoice re-derives totals."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        builder = workspace.invoice_builder("a", today=date(2024, 3, 1))
        builder.add_reimbursable("Printing")
        builder.update_item(0, amount=300)
        invoice_id = workspace.commit_invoice(builder).invoices[0].id

        edited = workspace.edit_saved_invoice("a", invoice_id, items=[{"amount": 500, "isReimbursable": True}])
        assert edited.invoices[0].total_expense == 500

    def test_commit_keeps_writes_made_while_drafting(self):
        """Test that costs added after the builder was opened survive the commit."""
        project = Project(
            id="a",
            quote=QuoteData(
                custom_real_total=1200000,
                payment_terms=[PaymentTerm(id="t1", percentage=30)],
            ),
        )
        workspace, storage = make_workspace(projects=[project])
        builder = workspace.invoice_builder("a", today=date(2024, 3, 1))
        builder.select_term("t1")
        workspace.add_cost("a", Cost(id="c1", amount=800))
        workspace.update_project(workspace.get_project("a").model_copy(update={"name": "Renamed"}))

        saved = workspace.commit_invoice(builder)

        stored = storage.load_projects()[0]
        assert [c.id for c in stored.costs] == ["c1"]
        assert stored.name == "Renamed"
        assert len(stored.invoices) == 1
        assert saved.costs[0].amount == 800
        assert [c.id for c in builder.project.costs] == ["c1"]

    def test_update_quote(self):
        """Test replacing a quote."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        workspace.update_quote("a", QuoteData(custom_real_total=5000))
        assert workspace.contract_total("a") == 5000

    def test_storage_failure_leaves_memory_unchanged(self):
        """Test that a failed write does not change in-memory state."""
        workspace, storage = make_workspace(projects=make_projects("a"))
        storage.fail_writes = True
        with pytest.raises(StorageError):
            workspace.delete_project("a")
        assert [p.id for p in workspace.projects] == ["a"]
        assert not workspace.needs_export


class TestSettingsAndLedgerWrites:
    """Tests for settings and general fund writes."""

    def test_save_settings_marks_dirty(self):
        """Test that a settings save sets the flag."""
        workspace, storage = make_workspace()
        settings = workspace.settings.model_copy(update={"project_types": ["Only"]})
        workspace.save_settings(settings)
        assert storage.load_settings().project_types == ["Only"]
        assert workspace.needs_export

    def test_cannot_remove_last_bank_account(self):
        """Test that one bank account must always remain."""
        workspace, _ = make_workspace()
        with pytest.raises(SettingsError):
            workspace.remove_bank_account("default-company")

    def test_remove_bank_account(self):
        """Test removing one of several accounts."""
        settings = FirmSettings(bank_accounts=[BankAccount(id="a"), BankAccount(id="b")])
        workspace, _ = make_workspace(settings=settings)
        workspace.remove_bank_account("a")
        assert [acc.id for acc in workspace.settings.bank_accounts] == ["b"]

    def test_transaction_writes(self):
        """Test add, update and delete of general fund rows."""
        workspace, storage = make_workspace()
        workspace.add_transaction(GeneralTransaction(id="g1", type=TransactionType.INCOME, amount=100))
        workspace.add_transaction(GeneralTransaction(id="g2", amount=40))
        assert [t.id for t in workspace.general_fund] == ["g2", "g1"]

        workspace.update_transaction(GeneralTransaction(id="g2", amount=60))
        workspace.delete_transaction("g1")
        assert [(t.id, t.amount) for t in storage.load_general_fund()] == [("g2", 60)]
        assert workspace.needs_export

    def test_unknown_transaction_is_not_written(self):
        """Test that updating or deleting a missing row raises and writes nothing."""
        workspace, storage = make_workspace(general_fund=[GeneralTransaction(id="g1", amount=100)])

        with pytest.raises(TransactionNotFoundError):
            workspace.update_transaction(GeneralTransaction(id="missing", amount=5))
        with pytest.raises(TransactionNotFoundError):
            workspace.delete_transaction("missing")

        assert [(t.id, t.amount) for t in storage.load_general_fund()] == [("g1", 100)]
        assert not workspace.needs_export


class TestImport:
    """Tests for the three import shapes."""

    def test_legacy_array_replaces_collection(self):
        """Test 2 imported projects over 3 existing ones."""
        workspace, _ = make_workspace(
            projects=make_projects("a", "b", "c"),
            general_fund=[GeneralTransaction(id="g1")],
        )
        workspace.create_project()
        assert workspace.needs_export

        text = json.dumps([{"id": "x", "name": "X"}, {"id": "y", "name": "Y"}])
        outcome = workspace.import_text(text, approve)

        assert outcome.applied
        assert outcome.kind == ImportKind.LEGACY_ARRAY
        assert len(workspace.projects) == 2
        assert [t.id for t in workspace.general_fund] == ["g1"]
        assert not workspace.needs_export

    def test_declined_confirmation_is_noop(self):
        """Test that declining keeps the collection."""
        workspace, _ = make_workspace(projects=make_projects("a", "b", "c"))
        outcome = workspace.import_text(json.dumps([{"id": "x", "name": "X"}]), decline)
        assert not outcome.applied
        assert len(workspace.projects) == 3

    def test_full_backup_restores_general_fund(self):
        """Test that a full backup replaces both collections."""
        workspace, storage = make_workspace(
            projects=make_projects("a"),
            general_fund=[GeneralTransaction(id="old")],
        )
        text = json.dumps({
            "version": "1.3.0",
            "projects": [{"id": "x", "name": "X"}],
            "generalFund": [{"id": "new", "amount": 10}],
        })
        workspace.import_text(text, approve)
        assert [t.id for t in storage.load_general_fund()] == ["new"]
        assert [p.id for p in workspace.projects] == ["x"]

    def test_failed_full_restore_changes_nothing(self):
        """Test that a storage failure during a full backup import keeps the old dataset."""
        workspace, storage = make_workspace(
            projects=make_projects("a"),
            general_fund=[GeneralTransaction(id="old")],
        )
        workspace.create_project()
        storage.fail_writes = True
        text = json.dumps({
            "version": "1.3.0",
            "projects": [{"id": "x", "name": "X"}],
            "generalFund": [{"id": "new", "amount": 10}],
        })

        with pytest.raises(StorageError):
            workspace.import_text(text, approve)

        assert len(workspace.projects) == 2
        assert [t.id for t in workspace.general_fund] == ["old"]
        assert [t.id for t in storage.load_general_fund()] == ["old"]
        assert workspace.needs_export

    def test_projects_write_failure_puts_general_fund_back(self, monkeypatch):
        """Test that the general fund is rewritten when the projects write fails."""
        workspace, storage = make_workspace(
            projects=make_projects("a"),
            general_fund=[GeneralTransaction(id="old")],
        )

        def failing_save(projects):
            raise StorageError("disk full")

        monkeypatch.setattr(storage, "save_projects", failing_save)
        text = json.dumps({
            "version": "1.3.0",
            "projects": [{"id": "x", "name": "X"}],
            "generalFund": [{"id": "new", "amount": 10}],
        })

        with pytest.raises(StorageError):
            workspace.import_text(text, approve)

        assert [t.id for t in storage.load_general_fund()] == ["old"]
        assert [p.id for p in storage.load_projects()] == ["a"]
        assert [t.id for t in workspace.general_fund] == ["old"]
        assert [p.id for p in workspace.projects] == ["a"]
        assert not workspace.needs_export

    def test_single_project_replaces_by_id(self):
        """Test that a single import replaces its match and leaves others alone."""
        original = make_projects("a", "b", "c")
        workspace, _ = make_workspace(projects=original)
        text = json.dumps({"id": "b", "name": "Imported B"})

        outcome = workspace.import_text(text, approve)

        assert outcome.replaced_existing
        projects = workspace.projects
        assert [p.id for p in projects] == ["a", "b", "c"]
        assert projects[1].name == "Imported B"
        assert projects[0] == original[0]
        assert projects[2] == original[2]
        assert workspace.needs_export

    def test_single_new_project_is_prepended(self):
        """Test that an unknown id is added at the top without asking."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        asked = []
        outcome = workspace.import_text(json.dumps({"id": "z", "name": "Z"}), asked.append)
        assert outcome.applied
        assert asked == []
        assert [p.id for p in workspace.projects] == ["z", "a"]

    def test_invalid_import_changes_nothing(self):
        """Test that rejected documents leave the dataset untouched."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        with pytest.raises(InvalidFormatError):
            workspace.import_text(json.dumps({"foo": 1}), approve)
        assert [p.id for p in workspace.projects] == ["a"]
        assert not workspace.needs_export


class TestExportAndSync:
    """Tests for export and server sync."""

    def test_full_export_clears_flag(self):
        """Test that a successful export writes the backup and clears the flag."""
        workspace, storage = make_workspace(projects=make_projects("a"))
        workspace.add_transaction(GeneralTransaction(id="g1"))

        path = workspace.export_full_backup(datetime(2024, 3, 1, 9, 0, 0))

        assert path.name == "ArchiFinance_FullBackup_20240301_090000.json"
        document = json.loads(storage.exports[path.name])
        assert [p["id"] for p in document["projects"]] == ["a"]
        assert [t["id"] for t in document["generalFund"]] == ["g1"]
        assert not workspace.needs_export

    def test_failed_export_keeps_flag(self):
        """Test that a failed export raises and leaves the flag set."""
        workspace, storage = make_workspace(projects=make_projects("a"))
        workspace.create_project()
        storage.fail_writes = True
        with pytest.raises(ExportError):
            workspace.export_full_backup()
        assert workspace.needs_export

    def test_project_export_does_not_clear_flag(self):
        """Test that a per-project export leaves the flag alone."""
        workspace, storage = make_workspace(projects=[Project(id="a", name="陳宅")])
        workspace.add_transaction(GeneralTransaction(id="g1"))
        path = workspace.export_project("a", today=date(2024, 3, 1))
        assert path.name == "陳宅_20240301.json"
        assert json.loads(storage.exports[path.name])["id"] == "a"
        assert workspace.needs_export

    def test_sync_replaces_projects(self):
        """Test that a successful pull replaces projects and clears the flag."""
        workspace, storage = make_workspace(projects=make_projects("a"))
        workspace.create_project()
        workspace.sync_from_server(lambda: make_projects("s1", "s2"))
        assert [p.id for p in storage.load_projects()] == ["s1", "s2"]
        assert not workspace.needs_export

    def test_failed_sync_changes_nothing(self):
        """Test that a failed pull leaves state and flag untouched."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        workspace.create_project()

        def failing_fetch():
            raise SyncError("server down")

        with pytest.raises(SyncError):
            workspace.sync_from_server(failing_fetch)
        assert len(workspace.projects) == 2
        assert workspace.needs_export


class TestWorkspaceReads:
    """Tests for derived figures read through the workspace."""

    def test_reports_follow_writes(self):
        """Test that reads always reflect the latest write."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        workspace.add_cost("a", Cost(amount=1000, date="2024-01-01"))
        assert workspace.rollup().total_project_cost == 1000
        workspace.add_cost("a", Cost(amount=500, date="2024-01-02"))
        assert workspace.rollup().total_project_cost == 1500
        assert workspace.ledger_summary().total_project_cost == 1500

    def test_unified_ledger_and_cards(self):
        """Test the combined ledger and project cards."""
        workspace, _ = make_workspace(projects=make_projects("a"))
        workspace.add_cost("a", Cost(id="c1", date="2024-01-02"))
        workspace.add_transaction(GeneralTransaction(id="g1", date="2024-01-01"))
        assert [e.id for e in workspace.unified_ledger()] == ["c1", "g1"]
        assert [e.id for e in workspace.unified_ledger(LedgerView.GENERAL)] == ["g1"]
        assert [c.project.id for c in workspace.project_cards()] == ["a"]

    def test_validate_quote(self):
        """Test that quote validation is advisory only."""
        project = Project(id="a", quote=QuoteData(payment_terms=[PaymentTerm(percentage=50)]))
        workspace, _ = make_workspace(projects=[project])
        assert workspace.validate_quote("a").has_warnings


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
