from __future__ import annotations
import sys
import argparse
from plugin_bootstrap.core.config import settings
from plugin_bootstrap.core.logging_config import configure_logging
from plugin_bootstrap.bootstrap import BootstrapContext, run
from plugin_bootstrap.settings.store import SettingStores
from plugin_bootstrap.db.session import make_session_factory


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='plugin-bootstrap', description='Load plugin roots into a fresh host.')
    parser.add_argument('roots', nargs='*', help='plugin root directories, lowest priority first')
    parser.add_argument('--database-url', default=None, help='override PLUGIN_BOOTSTRAP_DATABASE_URL')
    parser.add_argument('--log-level', default=None, help='override PLUGIN_BOOTSTRAP_LOG_LEVEL')
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    configure_logging(args.log_level or settings.log_level)
    roots = args.roots or settings.plugin_roots
    print(f"[entrypoint] starting version={settings.version} dev_mode={settings.dev_mode} roots={len(roots)}", flush=True)
    for line in settings.diagnostics or []:
        print(f"[entrypoint][config] {line}", flush=True)
    stores = SettingStores(make_session_factory(args.database_url))
    ctx = run(roots, BootstrapContext(stores=stores))
    counts = ' '.join(f"{category}={n}" for category, n in stores.count().items())
    print(
        f"[entrypoint] plugins={len(ctx.host.plugins)} templates={len(ctx.templates)} "
        f"settings[{counts}] failed={ctx.fail}",
        flush=True,
    )
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
