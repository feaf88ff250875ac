from __future__ import annotations
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict

SettingCategory = Literal['system', 'account', 'preference', 'domain']
SETTING_CATEGORIES: tuple[str, ...] = ('system', 'account', 'preference', 'domain')


class SettingDeclaration(BaseModel):
    """One entry of a plugin's setting.yaml, keyed by setting key in the file."""
    model_config = ConfigDict(extra='ignore')

    family: Optional[str] = None
    category: SettingCategory = 'system'
    type: Optional[str] = None
    default: Any = None
    value: Any = None  # fallback, used when default is falsy
    name: Optional[str] = None
    desc: Optional[str] = None

    def effective_value(self) -> Any:
        # a falsy default (0, "", false, null) falls back to value
        return self.default or self.value


class Setting(BaseModel):
    family: str
    key: str
    value: Any = None
    type: str = 'text'
    name: str
    desc: str = ''
