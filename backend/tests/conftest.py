import sys
import pathlib
import pytest

# Ensure backend root (containing the 'plugin_bootstrap' package) is on sys.path
BACKEND_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from plugin_bootstrap.db.session import make_session_factory
from plugin_bootstrap.plugin_runtime.host import PluginHost
from plugin_bootstrap.plugin_runtime.templates import TemplateRegistry
from plugin_bootstrap.settings.store import SettingStores


@pytest.fixture(autouse=True)
def _no_dev_mode(monkeypatch):
    """Development mode is opt-in per test via monkeypatch.setenv('DEV', ...)."""
    monkeypatch.delenv('DEV', raising=False)


@pytest.fixture
def stores():
    """Isolated in-memory setting stores per test."""
    return SettingStores(make_session_factory('sqlite://'))


@pytest.fixture
def templates():
    return TemplateRegistry()


@pytest.fixture
def host(stores, templates):
    h = PluginHost(stores=stores, templates=templates)
    h.provide('events', [])
    return h


@pytest.fixture
def events(host):
    return host.get('events')
