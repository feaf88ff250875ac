from __future__ import annotations
"""Category setting stores backed by SQLAlchemy.

Four categories share one table and are told apart by the `category`
column. Accepting a setting whose (category, key) already exists replaces
the stored row, so the last plugin root to declare a key wins.
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from plugin_bootstrap.db.session import make_session_factory
from plugin_bootstrap.models.setting import SettingRow
from plugin_bootstrap.schemas.setting import SETTING_CATEGORIES, Setting

_log = logging.getLogger(__name__)

SettingAcceptor = Callable[[Setting], None]


class SettingStores:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory or make_session_factory()

    def _session(self) -> Session:
        return self._session_factory()

    def accept(self, category: str, setting: Setting) -> None:
        if category not in SETTING_CATEGORIES:
            raise ValueError(f"unknown setting category: {category}")
        with self._session() as db:
            row = db.execute(
                select(SettingRow).where(SettingRow.category == category, SettingRow.key == setting.key)
            ).scalar_one_or_none()
            if row is None:
                row = SettingRow(category=category, key=setting.key)
                db.add(row)
            elif row.family != setting.family:
                _log.debug("setting %s/%s overridden by family=%s (was %s)", category, setting.key, setting.family, row.family)
            row.family = setting.family
            row.type = setting.type
            row.name = setting.name
            row.desc = setting.desc
            row.value = setting.value
            db.commit()

    def system(self, setting: Setting) -> None:
        self.accept('system', setting)

    def account(self, setting: Setting) -> None:
        self.accept('account', setting)

    def preference(self, setting: Setting) -> None:
        self.accept('preference', setting)

    def domain(self, setting: Setting) -> None:
        self.accept('domain', setting)

    def acceptors(self) -> Mapping[str, SettingAcceptor]:
        return {
            'system': self.system,
            'account': self.account,
            'preference': self.preference,
            'domain': self.domain,
        }

    def get(self, category: str, key: str) -> Setting | None:
        with self._session() as db:
            row = db.execute(
                select(SettingRow).where(SettingRow.category == category, SettingRow.key == key)
            ).scalar_one_or_none()
            return _to_setting(row) if row else None

    def value(self, category: str, key: str, default: Any = None) -> Any:
        setting = self.get(category, key)
        if setting is None or setting.value is None:
            return default
        return setting.value

    def list(self, category: str) -> List[Setting]:
        with self._session() as db:
            rows = db.execute(
                select(SettingRow).where(SettingRow.category == category).order_by(SettingRow.key)
            ).scalars().all()
            return [_to_setting(r) for r in rows]

    def count(self) -> Dict[str, int]:
        return {category: len(self.list(category)) for category in SETTING_CATEGORIES}


def _to_setting(row: SettingRow) -> Setting:
    return Setting(
        family=row.family,
        key=row.key,
        value=row.value,
        type=row.type,
        name=row.name or row.key,
        desc=row.desc or '',
    )
