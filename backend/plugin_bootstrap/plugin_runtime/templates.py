from __future__ import annotations
"""Template ingestion from plugin roots.

Each root may ship a `template/` (or `templates/`) directory. Every file in
it is registered under its forward-slash relative path, so a later root
replaces an earlier root's file with the same path. A root whose templates
fail to load is appended to the fail list and skipped by later passes that
share the list.
"""
import os
import types
import logging
from collections.abc import MutableMapping
from typing import Any, Dict, Iterable, Iterator, List, Optional

import aiofiles
import aiofiles.os

from plugin_bootstrap.core.config import settings
from plugin_bootstrap.plugin_runtime.files import locate_file, walk_files
from plugin_bootstrap.plugin_runtime.host import load_module, module_name_for

_log = logging.getLogger("plugin_bootstrap.plugins.templates")

TEMPLATE_DIRNAMES = ('template', 'templates')
BYTECODE_DIR = '__pycache__'


class TemplateRegistry(MutableMapping):
    """Raw template text by key, plus the compiled view for module templates."""

    def __init__(self) -> None:
        self._raw: Dict[str, str] = {}
        self.compiled: Dict[str, types.ModuleType] = {}

    def __setitem__(self, key: str, value: Any) -> None:
        if isinstance(value, types.ModuleType):
            self.compiled[key] = value
        else:
            self._raw[key] = value

    def __getitem__(self, key: str) -> str:
        return self._raw[key]

    def __delitem__(self, key: str) -> None:
        del self._raw[key]
        self.compiled.pop(key, None)

    def __iter__(self) -> Iterator[str]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def source(self, key: str) -> Optional[str]:
        return self._raw.get(f"{key}{settings.template_source_suffix}")

    def __repr__(self) -> str:
        return f"TemplateRegistry({len(self._raw)} entries, {len(self.compiled)} compiled)"


def is_compiled_template(key: str) -> bool:
    return os.path.splitext(key)[1] in settings.compiled_template_extensions


async def load_templates(pending: Iterable[str], fail: List[str], registry: TemplateRegistry) -> int:
    """Ingest every root's template directory; returns how many files were stored."""
    stored = 0
    for root in pending:
        if root in fail:
            continue
        folder = await locate_file(root, TEMPLATE_DIRNAMES)
        if not folder or not await aiofiles.os.path.isdir(folder):
            continue
        try:
            for key in await walk_files(folder):
                # bytecode written when compiled templates are imported
                if BYTECODE_DIR in key.split('/'):
                    continue
                full = os.path.abspath(os.path.join(folder, key))
                if is_compiled_template(key):
                    registry[key] = load_module(full, module_name_for(f"template:{full}"))
                async with aiofiles.open(full, 'r', encoding='utf-8') as fh:
                    registry[key] = await fh.read()
                if settings.dev_mode:
                    registry[f"{key}{settings.template_source_suffix}"] = full
                stored += 1
            _log.info("Template init: %s", root)
        except Exception as exc:  # noqa: BLE001
            fail.append(root)
            _log.error("Template load fail: %s", root)
            _log.error("%s", exc, exc_info=True)
    return stored
