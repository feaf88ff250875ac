from pathlib import Path
from pydantic import BaseModel
import os
from dotenv import load_dotenv
from plugin_bootstrap import __version__

"""Central configuration.

Values are read once from the environment when this module is imported. A
repo-level `config.env` file (or the file named by PLUGIN_BOOTSTRAP_CONFIG_FILE)
is loaded first so local development can keep overrides out of the shell.

Env vars:
  DEV                               - any non-empty value enables development mode (template source paths)
  PLUGIN_BOOTSTRAP_LOG_LEVEL        - root logger level
  PLUGIN_BOOTSTRAP_DATABASE_URL     - SQLAlchemy URL for the setting stores
  PLUGIN_BOOTSTRAP_WALK_MAX_DEPTH   - maximum template directory depth
  PLUGIN_BOOTSTRAP_ROOTS            - default plugin roots for the CLI (os.pathsep separated)
"""

_diagnostics: list[str] = []

cfg_override = os.getenv('PLUGIN_BOOTSTRAP_CONFIG_FILE')
candidates = []
if cfg_override:
    candidates.append(Path(cfg_override))
candidates.append(Path.cwd() / 'config.env')
candidates.append(Path.cwd() / 'backend' / 'config.env')

for p in candidates:
    if p.exists():
        load_dotenv(str(p))
        _diagnostics.append(f"loaded_config_file={p}")
        break


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        _diagnostics.append(f"invalid_int name={name} value={raw!r} using={default}")
        return default


def _env_roots(name: str) -> list[str]:
    raw = os.getenv(name) or ''
    return [part for part in raw.split(os.pathsep) if part.strip()]


if os.getenv('DEV'):
    _diagnostics.append("dev_mode=true")


class Settings(BaseModel):
    app_name: str = 'Plugin Bootstrap'
    version: str = __version__
    # Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = os.getenv('PLUGIN_BOOTSTRAP_LOG_LEVEL', 'INFO')
    # In-memory SQLite by default; the stores only live as long as the process.
    database_url: str = os.getenv('PLUGIN_BOOTSTRAP_DATABASE_URL', 'sqlite://')
    walk_max_depth: int = _env_int('PLUGIN_BOOTSTRAP_WALK_MAX_DEPTH', 32)
    plugin_roots: list[str] = _env_roots('PLUGIN_BOOTSTRAP_ROOTS')
    builtin_model_dir: Path = Path(__file__).resolve().parent.parent / 'model'
    builtin_model_prefix: str = 'plugin_bootstrap/model'
    template_source_suffix: str = '.source'
    compiled_template_extensions: tuple[str, ...] = ('.py',)
    diagnostics: list[str] | None = _diagnostics

    @property
    def dev_mode(self) -> bool:
        # any non-empty DEV counts, "0" included; read on every access
        return bool(os.getenv('DEV'))

settings = Settings()
