from __future__ import annotations
"""Category module loaders.

Every plugin root may carry one module per category (handler.py, model.py,
index.py for addons, lib.py, script.py, service.py). A loader walks the
roots in the order given, skips roots already in the fail list, and hands
apply-capable modules to the plugin host. Modules without apply() are
treated as passive: importing them is their whole job.

Load failures are logged and the pass moves on; the root is left out of
the fail list so a later call with the same arguments can retry it.
"""
import os
import enum
import types
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

import aiofiles.os

from plugin_bootstrap.core.config import settings
from plugin_bootstrap.plugin_runtime.files import locate_file
from plugin_bootstrap.plugin_runtime.host import PluginHost, is_plugin, load_module, unwrap_exports

_log = logging.getLogger("plugin_bootstrap.plugins.loader")

MODULE_SUFFIXES = ('.py', '.pyc')


class LoadCategory(str, enum.Enum):
    HANDLER = 'handler'
    MODEL = 'model'
    ADDON = 'addon'
    LIBRARY = 'lib'
    SCRIPT = 'script'
    SERVICE = 'service'

    @property
    def filename(self) -> str:
        return _CANONICAL_FILENAMES[self]

    @property
    def label(self) -> str:
        return self.value[:1].upper() + self.value[1:]


_CANONICAL_FILENAMES = {
    LoadCategory.HANDLER: 'handler',
    LoadCategory.MODEL: 'model',
    LoadCategory.ADDON: 'index',
    LoadCategory.LIBRARY: 'lib',
    LoadCategory.SCRIPT: 'script',
    LoadCategory.SERVICE: 'service',
}


@dataclass
class ModuleDescriptor:
    path: str
    category: LoadCategory
    module: types.ModuleType
    exports: Any
    applies: bool


class CategoryLoader:
    def __init__(self, category: LoadCategory, filename: Optional[str] = None):
        self.category = LoadCategory(category)
        self.filename = filename or self.category.filename

    @property
    def candidates(self) -> List[str]:
        return [f"{self.filename}{suffix}" for suffix in MODULE_SUFFIXES]

    async def resolve(self, root: str | os.PathLike) -> Optional[str]:
        return await locate_file(root, self.candidates)

    def describe(self, path: str) -> ModuleDescriptor:
        module = load_module(path)
        exports = unwrap_exports(module)
        return ModuleDescriptor(path=path, category=self.category, module=module, exports=exports, applies=is_plugin(exports))

    async def __call__(self, pending: Iterable[str], fail: List[str], host: PluginHost) -> List[ModuleDescriptor]:
        loaded: List[ModuleDescriptor] = []
        label = self.category.label
        for root in pending:
            if root in fail:
                continue
            path = await self.resolve(root)
            if not path:
                continue
            try:
                descriptor = self.describe(path)
                if descriptor.applies:
                    host.reload_plugin(path, {}, module=descriptor.module)
                else:
                    _log.info("%s init: %s", label, root)
                loaded.append(descriptor)
            except Exception as exc:  # noqa: BLE001
                _log.info("%s load fail: %s", label, root)
                _log.error("%s", exc, exc_info=True)
        return loaded

    def __repr__(self) -> str:
        return f"CategoryLoader({self.category.value!r}, {self.filename!r})"


handler = CategoryLoader(LoadCategory.HANDLER)
addon = CategoryLoader(LoadCategory.ADDON)
model = CategoryLoader(LoadCategory.MODEL)
lib = CategoryLoader(LoadCategory.LIBRARY)
script = CategoryLoader(LoadCategory.SCRIPT)
service = CategoryLoader(LoadCategory.SERVICE)


async def builtin_model(host: PluginHost) -> List[str]:
    """Register every module shipped in the built-in model directory."""
    model_dir = settings.builtin_model_dir
    registered: List[str] = []
    for entry in sorted(await aiofiles.os.listdir(model_dir)):
        if not entry.endswith('.py') or entry.startswith('_'):
            continue
        path = os.path.join(model_dir, entry)
        identity = f"{settings.builtin_model_prefix}/{entry.split('.')[0]}"
        try:
            module = load_module(path)
            exports = unwrap_exports(module)
            if not is_plugin(exports):
                _log.warning("builtin model without apply() skipped: %s", entry)
                continue
            host.reload_plugin(path, {}, identity, module=module)
            registered.append(identity)
        except Exception as exc:  # noqa: BLE001
            _log.info("Model load fail: %s", path)
            _log.error("%s", exc, exc_info=True)
    return registered
