"""Tests for patching bruno.json."""
import json

import pytest

from op_bruno.secrets.domains import bruno_config
from op_bruno.secrets.domains.bruno_config import BrunoConfig
from op_bruno.secrets.domains.errors import MalformedFileError, NotFoundError


class TestPatch:
    """Pure document patching."""

    def test_adds_missing_flags(self):
        document = {"name": "x"}

        changed = bruno_config.patch(document)

        assert changed is True
        assert document["scripts"] == {
            "filesystemAccess": {"allow": True},
            "moduleWhitelist": ["child_process"],
        }

    def test_keeps_existing_whitelist_order(self):
        document = {"scripts": {"moduleWhitelist": ["crypto", "fs"]}}
        bruno_config.patch(document)
        assert document["scripts"]["moduleWhitelist"] == ["crypto", "fs", "child_process"]

    def test_no_duplicate_entries(self):
        document = {"scripts": {"moduleWhitelist": ["child_process"], "filesystemAccess": {"allow": True}}}

        assert bruno_config.patch(document) is False
        assert document["scripts"]["moduleWhitelist"] == ["child_process"]

    def test_preserves_unknown_keys(self):
        document = {
            "version": "1",
            "presets": {"requestType": "http"},
            "scripts": {"flow": "sequential", "filesystemAccess": {"allow": False, "note": "x"}},
            "x-custom": [1, 2, 3],
        }

        bruno_config.patch(document)

        assert document["presets"] == {"requestType": "http"}
        assert document["x-custom"] == [1, 2, 3]
        assert document["scripts"]["flow"] == "sequential"
        assert document["scripts"]["filesystemAccess"] == {"allow": True, "note": "x"}


class TestBrunoConfig:
    """Read-merge-write against the file system."""

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(NotFoundError):
            BrunoConfig(tmp_path).update()
        assert not (tmp_path / "bruno.json").exists()

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "bruno.json").write_text("{ not json")
        with pytest.raises(MalformedFileError):
            BrunoConfig(tmp_path).load()

    def test_non_object_raises(self, tmp_path):
        (tmp_path / "bruno.json").write_text("[]")
        with pytest.raises(MalformedFileError):
            BrunoConfig(tmp_path).load()

    def test_update_round_trip_keeps_unknown_keys(self, collection_dir, reporter):
        before = json.loads((collection_dir / "bruno.json").read_text())

        assert BrunoConfig(collection_dir, reporter).update() is True

        after = json.loads((collection_dir / "bruno.json").read_text())
        for key, value in before.items():
            assert after[key] == value
        assert list(after)[: len(before)] == list(before)
        assert after["scripts"]["filesystemAccess"]["allow"] is True

    def test_second_update_skips_write(self, collection_dir, reporter):
        config = BrunoConfig(collection_dir, reporter)
        config.update()
        mtime_content = (collection_dir / "bruno.json").read_text()

        assert config.update() is False
        assert (collection_dir / "bruno.json").read_text() == mtime_content

    def test_get_name(self, collection_dir):
        assert BrunoConfig(collection_dir).get_name() == "My API"

    def test_get_name_falls_back_to_directory(self, tmp_path):
        (tmp_path / "bruno.json").write_text('{"version": "1"}')
        assert BrunoConfig(tmp_path).get_name() == tmp_path.name
