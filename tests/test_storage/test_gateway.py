"""Tests for the persistence gateways."""

import json

import pytest

from studyverse.errors import PersistenceWriteError
from studyverse.storage.gateway import InMemoryGateway, JsonFileGateway


class TestInMemoryGateway:
    """Test the in-memory document store."""

    def test_missing_key_reads_none(self):
        """Test that an unknown key is absent."""
        assert InMemoryGateway().read("profile_x") is None

    def test_write_then_read(self):
        """Test that a written document can be read back."""
        gateway = InMemoryGateway()
        gateway.write("profile_x", {"credits": 3})

        assert gateway.read("profile_x") == {"credits": 3}

    def test_documents_are_stored_as_json(self):
        """Test that documents are serialized on write."""
        gateway = InMemoryGateway()
        gateway.write("history_x", [{"id": "1"}])

        assert json.loads(gateway.documents["history_x"]) == [{"id": "1"}]

    def test_malformed_json_reads_none(self):
        """Test that unparsable content is treated as absent."""
        gateway = InMemoryGateway({"history_x": "[{not json"})

        assert gateway.read("history_x", expected=list) is None

    def test_wrong_container_reads_none(self):
        """Test that an object where a list is expected is treated as absent."""
        gateway = InMemoryGateway({"history_x": '{"id": "1"}'})

        assert gateway.read("history_x", expected=list) is None

    def test_scalar_document_reads_none(self):
        """Test that a bare JSON scalar is treated as absent."""
        gateway = InMemoryGateway({"profile_x": "42"})

        assert gateway.read("profile_x", expected=dict) is None


class TestJsonFileGateway:
    """Test the file-backed document store."""

    def test_creates_directory_on_write(self, tmp_path):
        """Test that the data directory is created lazily."""
        gateway = JsonFileGateway(tmp_path / "data")
        gateway.write("profile_abc", {"credits": 5})

        assert (tmp_path / "data" / "profile_abc.json").exists()

    def test_round_trip(self, tmp_path):
        """Test that a document survives a new gateway instance."""
        JsonFileGateway(tmp_path).write("history_guest", [{"id": "1"}])

        assert JsonFileGateway(tmp_path).read("history_guest", expected=list) == [{"id": "1"}]

    def test_missing_file_reads_none(self, tmp_path):
        """Test that a missing file is absent."""
        assert JsonFileGateway(tmp_path).read("profile_nobody") is None

    def test_corrupt_file_reads_none(self, tmp_path):
        """Test that a corrupt file is treated as absent."""
        gateway = JsonFileGateway(tmp_path)
        gateway.path_for("profile_abc").write_text("{oops", encoding="utf-8")

        assert gateway.read("profile_abc") is None

    def test_unsafe_key_characters_are_replaced(self, tmp_path):
        """Test that keys cannot escape the data directory."""
        gateway = JsonFileGateway(tmp_path)
        path = gateway.path_for("profile_../../etc")

        assert path.parent == tmp_path
        assert "/" not in path.name

    def test_no_temp_file_left_behind(self, tmp_path):
        """Test that writes replace the target atomically."""
        gateway = JsonFileGateway(tmp_path)
        gateway.write("profile_abc", {"credits": 1})

        assert [p.name for p in tmp_path.iterdir()] == ["profile_abc.json"]

    def test_unwritable_directory_raises_write_error(self, tmp_path):
        """Test that a refused write surfaces as a session core error."""
        blocker = tmp_path / "data"
        blocker.write_text("not a directory")

        with pytest.raises(PersistenceWriteError):
            JsonFileGateway(blocker).write("profile_abc", {"credits": 1})
