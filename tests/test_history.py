"""Tests for the session history log."""

from rustrepl.lib.history import SessionHistory


class TestSessionHistory:
    """Test loading and saving accepted input."""

    def test_load_missing_file(self, tmp_path):
        history = SessionHistory(tmp_path / "history.log")
        assert history.load() == 0
        assert len(history) == 0

    def test_save_then_load_preserves_order(self, tmp_path):
        """Test entries survive a save/load cycle in order."""
        path = tmp_path / "cache" / "history.log"
        history = SessionHistory(path)
        for line in ["let x = 1;", "use std::io;", "println!(\"{}\", x);"]:
            history.add(line)
        assert history.save()

        restored = SessionHistory(path)
        assert restored.load() == 3
        assert restored.get_entries() == ["let x = 1;", "use std::io;", "println!(\"{}\", x);"]

    def test_save_keeps_newest_entries(self, tmp_path):
        path = tmp_path / "history.log"
        history = SessionHistory(path, max_length=2)
        for i in range(5):
            history.add(f"f{i}();")
        history.save()
        assert path.read_text() == "f3();\nf4();\n"

    def test_load_appends_new_entries_after_existing(self, tmp_path):
        """Test new input is appended after loaded history."""
        path = tmp_path / "history.log"
        path.write_text("old();\n\n")
        history = SessionHistory(path)
        history.load()
        history.add("new();")
        history.save()
        assert path.read_text() == "old();\nnew();\n"

    def test_save_failure_returns_false(self, tmp_path):
        """Test an unwritable location is reported, not raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        history = SessionHistory(blocker / "history.log")
        history.add("x();")
        assert history.save() is False

    def test_get_entries_is_copy(self, tmp_path):
        history = SessionHistory(tmp_path / "h.log")
        history.add("a();")
        history.get_entries().append("b();")
        assert history.get_entries() == ["a();"]

    def test_load_undecodable_file(self, tmp_path):
        """Test a history file with invalid bytes is skipped, not raised."""
        path = tmp_path / "history.log"
        path.write_bytes(b"let x = 1;\n\xff\xfe bad\n")
        history = SessionHistory(path)

        assert history.load() == 0
        assert len(history) == 0
