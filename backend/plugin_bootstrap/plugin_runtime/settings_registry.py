from __future__ import annotations
"""Settings declared by plugin roots (setting.yaml / settings.yaml).

Each document maps a setting key to its declaration. Declarations are
normalised into `Setting` records and handed to the store acceptor for
their category. System settings are namespaced by the root's directory
name; the other categories use the bare key.
"""
import os
import logging
import tempfile
from typing import Any, Iterable, List, Mapping

import aiofiles
import yaml

from plugin_bootstrap.plugin_runtime.files import locate_file
from plugin_bootstrap.schemas.setting import Setting, SettingDeclaration
from plugin_bootstrap.settings.store import SettingAcceptor

_log = logging.getLogger("plugin_bootstrap.plugins.settings")

SETTING_FILENAMES = ('setting.yaml', 'settings.yaml')


def expand_placeholders(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.replace('$TEMP', tempfile.gettempdir()).replace('$HOME', os.path.expanduser('~'))


def root_name(root: str | os.PathLike) -> str:
    return os.path.basename(os.path.normpath(os.fspath(root)))


def build_setting(name: str, key: str, declaration: SettingDeclaration) -> Setting:
    category = declaration.category
    return Setting(
        family=declaration.family or name,
        key=f"{name}.{key}" if category == 'system' else key,
        value=expand_placeholders(declaration.effective_value()),
        type=declaration.type or 'text',
        name=declaration.name or key,
        desc=declaration.desc or '',
    )


def parse_declarations(text: str) -> dict[str, SettingDeclaration]:
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"setting file must contain a mapping, got {type(data).__name__}")
    declarations: dict[str, SettingDeclaration] = {}
    for key, raw in data.items():
        if not isinstance(raw, Mapping):
            raise TypeError(f"setting {key!r} must be a mapping, got {type(raw).__name__}")
        declarations[str(key)] = SettingDeclaration.model_validate(dict(raw))
    return declarations


async def load_settings(
    pending: Iterable[str],
    fail: List[str],
    stores: Mapping[str, SettingAcceptor],
) -> int:
    """Register settings from every root; returns how many were registered."""
    registered = 0
    for root in pending:
        if root in fail:
            continue
        path = await locate_file(root, SETTING_FILENAMES)
        if not path:
            continue
        name = root_name(root)
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as fh:
                text = await fh.read()
            for key, declaration in parse_declarations(text).items():
                stores[declaration.category](build_setting(name, key, declaration))
                registered += 1
            _log.info("Config load: %s", root)
        except Exception as exc:  # noqa: BLE001
            _log.error("Config load fail: %s", root)
            _log.error("%s", exc, exc_info=True)
    return registered
