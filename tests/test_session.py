"""
Tests for the browser session: pending operations, navigation and the
end-to-end copy / cut / delete flows.
"""

import os
import shutil
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Config
from core.errors import ForbiddenError, ListingError, MetadataError
from core.logger import AuditLogger, ActionType
from modules.file_manager.lister import list_directory
from modules.file_manager.pending import OperationKind
from modules.file_manager.session import NOTHING_SELECTED, NOTHING_TO_PASTE, Session


class FakeTrash:
    """Moves paths into a local directory instead of the OS trash."""

    def __init__(self, trash_dir):
        self.trash_dir = trash_dir
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        shutil.move(path, os.path.join(str(self.trash_dir), os.path.basename(path)))


@pytest.fixture
def tree(tmp_path):
    """Browse root holding '..', 'notes.txt' and 'docs', plus a sibling target."""
    root = tmp_path / "root"
    root.mkdir()
    (root / "notes.txt").write_text("notes")
    (root / "docs").mkdir()
    (root / "docs" / "guide.md").write_text("guide")
    (tmp_path / "target").mkdir()
    return tmp_path


@pytest.fixture
def logger(tmp_path):
    return AuditLogger(log_path=str(tmp_path / "audit" / "audit.jsonl"))


@pytest.fixture
def trash(tmp_path):
    trash_dir = tmp_path / "trash"
    trash_dir.mkdir()
    return FakeTrash(trash_dir)


@pytest.fixture
def session(tree, logger, trash):
    return Session(start_path=str(tree / "root"), logger=logger, trash_func=trash)


def select(session, name):
    """Move the cursor onto ``name``."""
    index = session.snapshot.index_of(name)
    assert index is not None, f"{name} not listed"
    session.cursor.index = index
    assert session.selected_name == name


class TestSessionStart:
    """Test session construction."""

    def test_initial_state(self, session, tree):
        assert session.snapshot.names == ["..", "docs", "notes.txt"]
        assert session.selection == 0
        assert session.status_message == os.path.realpath(str(tree / "root"))
        assert session.pending.is_idle

    def test_missing_start_directory_raises(self, tree, logger):
        with pytest.raises(ListingError):
            Session(start_path=str(tree / "missing"), logger=logger)

    def test_process_cwd_untouched(self, session, tree):
        before = os.getcwd()
        select(session, "docs")
        session.activate_selected()

        assert os.getcwd() == before


class TestCursorActions:
    """Test cursor movement through the session."""

    def test_move_and_clear(self, session):
        assert session.move_cursor_next() == 1
        assert session.move_cursor_previous() == 0
        assert session.move_cursor_previous() == 2

        session.status_message = "something else"
        session.clear_selection()

        assert session.selection is None
        assert session.selected_name is None
        assert session.status_message == session.cwd


class TestPendingOperations:
    """Test the copy / cut / paste state machine."""

    def test_begin_copy_captures_source(self, session):
        select(session, "notes.txt")

        assert session.begin_copy()
        assert session.pending.kind is OperationKind.COPY
        assert session.pending.source_path == os.path.join(session.cwd, "notes.txt")
        assert session.pending.source_name == "notes.txt"
        assert session.status_message == f"Copied {session.pending.source_path}"

    def test_begin_cut_captures_source(self, session):
        select(session, "docs")

        assert session.begin_cut()
        assert session.pending.kind is OperationKind.CUT
        assert session.status_message.startswith("Cut ")

    def test_new_capture_replaces_pending(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        select(session, "docs")
        session.begin_cut()

        assert session.pending.kind is OperationKind.CUT
        assert session.pending.source_name == "docs"

    def test_paste_when_idle(self, session):
        snapshot = session.snapshot

        assert not session.paste_if_pending()
        assert session.status_message == NOTHING_TO_PASTE
        assert session.snapshot is snapshot

    @pytest.mark.parametrize("action", ["begin_copy", "begin_cut", "delete_selected"])
    def test_nothing_selected(self, session, action):
        session.clear_selection()

        assert not getattr(session, action)()
        assert session.status_message == NOTHING_SELECTED
        assert session.pending.is_idle

    @pytest.mark.parametrize("action", ["begin_copy", "begin_cut", "delete_selected"])
    def test_parent_entry_forbidden(self, session, trash, action):
        select(session, "notes.txt")
        session.begin_copy()
        pending = session.pending
        select(session, "..")
        snapshot = session.snapshot

        assert not getattr(session, action)()
        assert isinstance(session.last_error, ForbiddenError)
        assert "Forbidden" in session.status_message
        assert session.snapshot is snapshot
        assert session.selection == 0
        assert session.pending == pending
        assert trash.calls == []

    def test_paste_on_parent_entry_forbidden(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        select(session, "..")
        snapshot = session.snapshot

        assert not session.paste_if_pending()
        assert isinstance(session.last_error, ForbiddenError)
        assert session.snapshot is snapshot
        assert session.snapshot.names == ["..", "docs", "notes.txt"]

    def test_pending_survives_paste(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        pending = session.pending

        assert session.paste_if_pending()
        assert session.pending == pending

    def test_failed_paste_keeps_state(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        pending = session.pending
        os.remove(os.path.join(session.cwd, "notes.txt"))
        select(session, "docs")
        snapshot = session.snapshot

        assert not session.paste_if_pending()
        assert isinstance(session.last_error, MetadataError)
        assert session.status_message == "Error metadata"
        assert session.snapshot is snapshot
        assert session.selected_name == "docs"
        assert session.pending == pending


class TestCopyScenarios:
    """End-to-end copy flows."""

    def test_copy_next_to_itself(self, session):
        select(session, "notes.txt")
        session.begin_copy()

        assert session.paste_if_pending()
        assert "notes (1).txt" in session.snapshot.names
        assert session.status_message == "Copied file successfully"
        assert session.selection == 0

    def test_repeated_paste_gets_new_name(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        session.paste_if_pending()

        # the refresh put the cursor back on '..'
        select(session, "notes.txt")
        session.paste_if_pending()

        assert "notes (1).txt" in session.snapshot.names
        assert "notes (2).txt" in session.snapshot.names

    def test_refreshed_views_stay_in_sync(self, session):
        select(session, "notes.txt")
        session.begin_copy()
        session.paste_if_pending()

        assert len(session.snapshot.names) == len(session.snapshot.detail_rows)
        for name, row in zip(session.snapshot.names, session.snapshot.detail_rows):
            assert row.endswith(name)


class TestAuditLogFailure:
    """An unwritable audit log never interrupts a file operation."""

    def test_paste_refreshes_when_audit_log_unwritable(self, tree, trash, tmp_path):
        log_dir = tmp_path / "log-is-a-directory"
        log_dir.mkdir()
        logger = AuditLogger(log_path=str(log_dir))
        session = Session(start_path=str(tree / "root"), logger=logger, trash_func=trash)
        select(session, "notes.txt")
        session.begin_copy()

        assert session.paste_if_pending()
        assert "notes (1).txt" in session.snapshot.names
        assert session.status_message == "Copied file successfully"
        assert session.selection == 0
        assert isinstance(logger.last_write_error, OSError)

    def test_delete_and_navigate_with_unwritable_log(self, tree, trash, tmp_path):
        log_dir = tmp_path / "log-is-a-directory"
        log_dir.mkdir()
        session = Session(
            start_path=str(tree / "root"), logger=AuditLogger(log_path=str(log_dir)), trash_func=trash
        )
        select(session, "notes.txt")
        assert session.delete_selected()
        assert "notes.txt" not in session.snapshot.names

        select(session, "docs")
        assert session.activate_selected()
        assert session.snapshot.names == ["..", "guide.md"]

        select(session, "..")
        assert not session.delete_selected()
        assert isinstance(session.last_error, ForbiddenError)


class TestCutScenarios:
    """End-to-end move flows."""

    def test_cut_directory_and_paste_elsewhere(self, session, tree):
        select(session, "docs")
        session.begin_cut()

        select(session, "..")
        assert session.activate_selected()
        select(session, "target")
        assert session.activate_selected()

        # only '..' is listed here, paste with nothing selected
        session.clear_selection()
        assert session.paste_if_pending()

        assert session.status_message == "Moved directory successfully"
        assert "docs" in session.snapshot.names
        assert (tree / "target" / "docs" / "guide.md").exists()
        assert not (tree / "root" / "docs").exists()
        assert session.selection == 0


class TestDeleteScenarios:
    """End-to-end trash flows."""

    def test_delete_moves_to_trash_and_refreshes(self, session, trash):
        select(session, "notes.txt")

        assert session.delete_selected()
        assert "notes.txt" not in session.snapshot.names
        assert session.status_message == "Moved notes.txt successfully to Trash"
        assert session.selection == 0
        assert (trash.trash_dir / "notes.txt").exists()

    def test_delete_clears_pending(self, session):
        select(session, "docs")
        session.begin_copy()
        select(session, "notes.txt")
        session.delete_selected()

        assert session.pending.is_idle

    def test_delete_parent_entry(self, session, trash):
        select(session, "..")
        snapshot = session.snapshot

        assert not session.delete_selected()
        assert isinstance(session.last_error, ForbiddenError)
        assert session.snapshot is snapshot
        assert trash.calls == []

    def test_delete_only_entry_leaves_no_selection(self, tree, logger, trash):
        lonely = tree / "lonely"
        lonely.mkdir()
        (lonely / "only.txt").write_text("")
        config = Config(show_parent_entry=False)
        session = Session(start_path=str(lonely), config=config, logger=logger, trash_func=trash)

        assert session.delete_selected()
        assert len(session.snapshot) == 0
        assert session.selection is None


class TestNavigation:
    """Test activating entries."""

    def test_enter_directory(self, session, tree):
        select(session, "docs")

        assert session.activate_selected()
        assert session.cwd == os.path.realpath(str(tree / "root" / "docs"))
        assert session.status_message == session.cwd
        assert session.snapshot.names == ["..", "guide.md"]
        assert session.selection == 0

    def test_enter_parent(self, session, tree):
        select(session, "..")

        assert session.activate_selected()
        assert session.cwd == os.path.realpath(str(tree))
        assert "root" in session.snapshot.names

    def test_activate_file_is_silent_noop(self, session):
        select(session, "notes.txt")
        cwd = session.cwd
        snapshot = session.snapshot
        status = session.status_message

        assert not session.activate_selected()
        assert session.cwd == cwd
        assert session.snapshot is snapshot
        assert session.status_message == status
        assert session.selected_name == "notes.txt"

    def test_activate_file_reports_when_configured(self, tree, logger, trash):
        config = Config(navigation_errors="report")
        session = Session(start_path=str(tree / "root"), config=config, logger=logger, trash_func=trash)
        select(session, "notes.txt")

        assert not session.activate_selected()
        assert session.status_message == "Cannot enter notes.txt: Not a directory"

    def test_navigation_logged(self, session, logger):
        select(session, "docs")
        session.activate_selected()

        entries = logger.get_by_action_type(ActionType.NAVIGATE)

        assert len(entries) == 1
        assert entries[0].metadata["to"] == session.cwd

    def test_failed_relist_restores_directory(self, tree, logger, trash):
        docs = os.path.realpath(str(tree / "root" / "docs"))

        def flaky_lister(path, include_parent_entry=True):
            if path == docs:
                raise ListingError(path, "Permission denied")
            return list_directory(path, include_parent_entry)

        session = Session(
            start_path=str(tree / "root"), logger=logger, trash_func=trash, lister=flaky_lister
        )
        start = session.cwd
        select(session, "docs")

        with pytest.raises(ListingError):
            session.activate_selected()

        assert session.cwd == start


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
