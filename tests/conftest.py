"""Shared fixtures: a sample Bruno collection and fakes for external collaborators."""
import json
from pathlib import Path

import pytest

from op_bruno.secrets.domains import preferences
from op_bruno.secrets.domains.errors import ExternalToolError, VaultAccessError
from op_bruno.secrets.domains.op_client import VaultClient
from op_bruno.secrets.domains.reporter import Reporter


DEV_ENV = """vars {
  API_URL: https://dev.example.com
  ~DEBUG: true
}
vars:secret [
  API_KEY,
  CLIENT_SECRET
]
"""

PROD_ENV = """vars {
  API_URL: https://example.com
}
vars:secret [
  API_KEY
]
"""


class RecordingReporter(Reporter):
    """Reporter that keeps messages for assertions."""

    def __init__(self):
        self.infos = []
        self.warnings = []
        self.errors = []

    def info(self, message):
        self.infos.append(message)

    def warn(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)


class FakeVaultClient(VaultClient):
    """In-memory stand-in for the 1Password CLI."""

    def __init__(self, vaults=("Employee",), installed=True):
        self.vaults = set(vaults)
        self.installed = installed
        self.items = {}
        self.calls = []

    def check_installed(self):
        self.calls.append(("check_installed",))
        if not self.installed:
            raise ExternalToolError("Unable to access 1Password CLI", suggestions=["Install op"])
        return "2.30.0"

    def get_vault(self, name):
        self.calls.append(("get_vault", name))
        if name not in self.vaults:
            raise VaultAccessError(f"Unable to access vault \"{name}\"", suggestions=["op signin"])
        return {"id": f"vault-{name}", "name": name}

    def get_item(self, title, vault):
        self.calls.append(("get_item", title, vault))
        return self.items.get((vault, title))

    def create_item(self, fields, vault, title, template):
        self.calls.append(("create_item", title, vault))
        item = {
            "id": f"item-{len(self.items) + 1}",
            "title": title,
            "vault": {"name": vault},
            "category": template["category"],
            "fields": [{"label": f.label, "type": "CONCEALED", "value": f.value} for f in fields],
        }
        self.items[(vault, title)] = item
        return item

    def edit_item(self, item_id, fields):
        self.calls.append(("edit_item", item_id))
        item = next(i for i in self.items.values() if i["id"] == item_id)
        for f in fields:
            item["fields"].append({"label": f.label, "type": "CONCEALED", "value": f.value})
        return item


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def fake_vault():
    return FakeVaultClient()


@pytest.fixture
def collection_dir(tmp_path) -> Path:
    """A Bruno collection with two environments and a bruno.json."""
    root = tmp_path / "my-api"
    env_dir = root / "environments"
    env_dir.mkdir(parents=True)
    (env_dir / "dev.bru").write_text(DEV_ENV)
    (env_dir / "prod.bru").write_text(PROD_ENV)
    (root / "bruno.json").write_text(json.dumps({
        "version": "1",
        "name": "My API",
        "type": "collection",
        "ignore": ["node_modules", ".git"],
    }, indent=2))
    return root


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Fixture to create a temporary home directory for testing."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)
    monkeypatch.delenv("OP_BRUNO_VAULT", raising=False)

    fake_config_dir = fake_home / ".config" / "op-bruno"
    monkeypatch.setattr(preferences, "PREFERENCES_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")

    return fake_home
