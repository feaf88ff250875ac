from __future__ import annotations
"""Plugin host: imports plugin modules from disk and keeps their registrations.

A plugin is any module (or its `default` export) that satisfies the `Plugin`
protocol, i.e. exposes `apply(host, options)`. Re-registering the same
identity first tears the previous registration down, so `reload_plugin` can
be called repeatedly for one module.
"""
import os
import re
import sys
import types
import logging
import importlib
import importlib.util
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, TYPE_CHECKING, runtime_checkable

if TYPE_CHECKING:
    from plugin_bootstrap.settings.store import SettingStores
    from plugin_bootstrap.plugin_runtime.templates import TemplateRegistry

_log = logging.getLogger(__name__)

MODULE_PREFIX = '_plugin_bootstrap_'


@runtime_checkable
class Plugin(Protocol):
    def apply(self, host: "PluginHost", options: Mapping[str, Any]) -> Any: ...


@runtime_checkable
class Disposable(Protocol):
    def dispose(self, host: "PluginHost") -> Any: ...


@dataclass
class PluginRecord:
    name: str
    path: str
    module: types.ModuleType
    exports: Any
    options: Dict[str, Any] = field(default_factory=dict)


def module_name_for(identity: str) -> str:
    return MODULE_PREFIX + re.sub(r'\W', '_', identity)


def load_module(path: str | os.PathLike, module_name: Optional[str] = None) -> types.ModuleType:
    """Import a python source or compiled file and register it in sys.modules."""
    path = os.path.abspath(path)
    name = module_name or module_name_for(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f'cannot build import spec for {path}')
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def unwrap_exports(module: types.ModuleType) -> Any:
    """Prefer an explicit `default` export over the module object itself."""
    default = getattr(module, 'default', None)
    return default if default is not None else module


def is_plugin(exports: Any) -> bool:
    return isinstance(exports, Plugin) and callable(getattr(exports, 'apply', None))


class PluginHost:
    def __init__(
        self,
        stores: "SettingStores | None" = None,
        templates: "TemplateRegistry | None" = None,
    ) -> None:
        self.stores = stores
        self.templates = templates
        self._plugins: Dict[str, PluginRecord] = {}
        self._services: Dict[str, Any] = {}

    @property
    def plugins(self) -> Dict[str, PluginRecord]:
        return dict(self._plugins)

    def provide(self, name: str, value: Any) -> None:
        """Expose a named service to plugins; later calls replace earlier ones."""
        self._services[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self._services.get(name, default)

    def reload_plugin(
        self,
        path: str | os.PathLike,
        options: Optional[Mapping[str, Any]] = None,
        name: Optional[str] = None,
        module: Optional[types.ModuleType] = None,
    ) -> Any:
        """Register the plugin at `path`, replacing any earlier registration.

        A `module` already imported from `path` by the caller is registered as
        is; otherwise the file is imported here.
        """
        path = os.path.abspath(path)
        identity = name or path
        if identity in self._plugins:
            self.unload_plugin(identity)
        if module is None:
            module = load_module(path, module_name_for(identity))
        exports = unwrap_exports(module)
        if not is_plugin(exports):
            sys.modules.pop(module.__name__, None)
            raise TypeError(f'{path} does not expose apply()')
        record = PluginRecord(name=identity, path=path, module=module, exports=exports, options=dict(options or {}))
        self._plugins[identity] = record
        try:
            exports.apply(self, record.options)
        except Exception:
            self._plugins.pop(identity, None)
            sys.modules.pop(module.__name__, None)
            raise
        _log.debug("plugin applied name=%s path=%s", identity, path)
        return exports

    def unload_plugin(self, identity: str) -> bool:
        record = self._plugins.pop(identity, None)
        if record is None:
            return False
        if isinstance(record.exports, Disposable):
            try:
                record.exports.dispose(self)
            except Exception:
                _log.exception("plugin dispose failed name=%s", identity)
        # the caller may already have imported a fresh copy under the same name
        if sys.modules.get(record.module.__name__) is record.module:
            sys.modules.pop(record.module.__name__, None)
        importlib.invalidate_caches()
        _log.debug("plugin unloaded name=%s", identity)
        return True
