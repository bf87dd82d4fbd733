"""Unit tests for file cleanup."""

from dashenc.storage.cleanup import clean_files, delete_files


class TestDeleteFiles:
    def test_deletes_existing_and_ignores_missing(self, tmp_path):
        present = tmp_path / "a.mp4"
        present.write_text("x")
        assert delete_files([present, tmp_path / "missing.mp4"]) == []
        assert not present.exists()

    def test_directory_is_reported(self, tmp_path):
        directory = tmp_path / "dir"
        directory.mkdir()
        failures = delete_files([directory])
        assert [f.path for f in failures] == [str(directory)]
        assert directory.exists()


class TestCleanFiles:
    def test_logs_each_outcome(self, tmp_path):
        good = tmp_path / "a.mp4"
        good.write_text("x")
        bad = tmp_path / "dir"
        bad.mkdir()
        messages = []
        failures = clean_files([good, bad], messages.append)
        assert len(failures) == 1
        assert messages[0] == f"Deleted file {good}"
        assert messages[1].startswith(f"Failed to delete file {bad} Exception:")
