import logging
from dataclasses import asdict, dataclass, fields

from thela_rental.core.db_manager import DBManager


@dataclass
class AppConfig:
    storage_key: str = "carts"
    reminder_hour: int = 9
    reminder_minute: int = 0
    currency_symbol: str = "₹"
    encrypt_storage: bool = False


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _convert(name: str, raw: str, default):
    if isinstance(default, bool):
        text = raw.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int):
        value = int(raw)
        limit = 23 if name == "reminder_hour" else 59
        if not 0 <= value <= limit:
            raise ValueError(f"out of range 0..{limit}: {value}")
        return value
    if not raw.strip():
        raise ValueError("empty value")
    return raw


def load_config(db_manager: DBManager) -> AppConfig:
    """
    Read settings from the app_config table.

    Missing keys use the defaults. Malformed values are logged and replaced by
    their default so a bad setting never prevents the app from starting.
    """
    stored = db_manager.get_config()
    defaults = AppConfig()
    values = {}
    for f in fields(AppConfig):
        default = getattr(defaults, f.name)
        raw = stored.get(f.name)
        if raw is None:
            values[f.name] = default
            continue
        try:
            values[f.name] = _convert(f.name, raw, default)
        except ValueError as e:
            logging.warning(f"Ignoring invalid setting {f.name}={raw!r} ({e}); using {default!r}.")
            values[f.name] = default
    return AppConfig(**values)


def save_config(db_manager: DBManager, config: AppConfig):
    db_manager.save_config(asdict(config))
