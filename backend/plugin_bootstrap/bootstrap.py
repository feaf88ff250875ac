from __future__ import annotations
"""Startup driver: runs every loader over the plugin roots, in order.

The loaders share one fail list. Only the template loader adds to it, so a
root whose templates broke is skipped by the loaders that run after it.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from plugin_bootstrap.plugin_runtime import loader
from plugin_bootstrap.plugin_runtime.host import PluginHost
from plugin_bootstrap.plugin_runtime.settings_registry import load_settings
from plugin_bootstrap.plugin_runtime.templates import TemplateRegistry, load_templates
from plugin_bootstrap.settings.store import SettingStores

_log = logging.getLogger(__name__)


@dataclass
class BootstrapContext:
    stores: SettingStores = field(default_factory=SettingStores)
    templates: TemplateRegistry = field(default_factory=TemplateRegistry)
    fail: List[str] = field(default_factory=list)
    host: Optional[PluginHost] = None

    def __post_init__(self) -> None:
        if self.host is None:
            self.host = PluginHost(stores=self.stores, templates=self.templates)


async def bootstrap(roots: Iterable[str], ctx: Optional[BootstrapContext] = None) -> BootstrapContext:
    ctx = ctx or BootstrapContext()
    pending = [str(r) for r in roots]
    _log.info("bootstrapping %d plugin root(s)", len(pending))
    await loader.builtin_model(ctx.host)
    await loader.lib(pending, ctx.fail, ctx.host)
    await load_settings(pending, ctx.fail, ctx.stores.acceptors())
    await load_templates(pending, ctx.fail, ctx.templates)
    await loader.service(pending, ctx.fail, ctx.host)
    await loader.model(pending, ctx.fail, ctx.host)
    await loader.addon(pending, ctx.fail, ctx.host)
    await loader.handler(pending, ctx.fail, ctx.host)
    await loader.script(pending, ctx.fail, ctx.host)
    if ctx.fail:
        _log.warning("plugin roots skipped after failure: %s", ctx.fail)
    return ctx


def run(roots: Iterable[str], ctx: Optional[BootstrapContext] = None) -> BootstrapContext:
    return asyncio.run(bootstrap(roots, ctx))
