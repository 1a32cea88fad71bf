"""Application configuration: display currency and exchange-rate table."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from ..fx import DEFAULT_RATES, ExchangeRateTable, create_rate_table
from .currency import BASE_CURRENCY
from .errors import ConfigError

logger = logging.getLogger(__name__)

__all__ = [
    "AppConfig",
    "load_config",
    "save_config",
    "update_rates",
]


@dataclass(frozen=True)
class AppConfig:
    """
    Persisted dashboard settings.

    Attributes:
        display_currency: Currency totals are shown in
        rates: Exchange-rate table (currency -> rate-to-base)
        last_updated: Day the rates were last edited
    """

    display_currency: str = BASE_CURRENCY
    rates: ExchangeRateTable = field(default_factory=create_rate_table)
    last_updated: date | None = None

    def __post_init__(self):
        object.__setattr__(self, "display_currency", self.display_currency.upper())
        if self.display_currency not in self.rates:
            raise ConfigError(
                f"Display currency {self.display_currency} has no exchange rate"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serializable mapping (inverse of :func:`load_config`)."""
        return {
            "display_currency": self.display_currency,
            "base_currency": self.rates.base_currency,
            "rates": self.rates.as_dict(),
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


def load_config(
    source: str | Path | Mapping[str, Any] | None = None, *, format: str | None = None
) -> AppConfig:
    """
    Load settings from YAML/JSON/mapping.

    A missing file or ``None`` yields the defaults (DNT base, EUR 3.35,
    USD 3.10), matching a fresh installation.
    """
    if source is None:
        return AppConfig()

    if isinstance(source, Mapping):
        data, label = dict(source), "<mapping>"
    else:
        path = Path(source)
        if not path.exists():
            logger.debug("Config file %s not found, using defaults", path)
            return AppConfig()
        data, label = _read(path, format), str(path)

    base = str(data.get("base_currency") or BASE_CURRENCY).upper()
    raw_rates = data.get("rates")
    if raw_rates is None:
        raw_rates = DEFAULT_RATES if base == BASE_CURRENCY else {}
    if not isinstance(raw_rates, Mapping):
        raise ConfigError(f"{label}: 'rates' must be a mapping")
    rates = ExchangeRateTable(base, raw_rates)

    display = str(data.get("display_currency") or base).upper()
    if display not in rates:
        logger.warning(
            "%s: display currency %s has no rate, falling back to %s",
            label,
            display,
            base,
        )
        display = base

    return AppConfig(
        display_currency=display,
        rates=rates,
        last_updated=_coerce_date(data.get("last_updated"), f"{label}::last_updated"),
    )


def save_config(config: AppConfig, path: str | Path) -> None:
    """Write settings to ``path`` (JSON for ``.json``, YAML otherwise)."""
    path = Path(path)
    payload = config.to_dict()
    if path.suffix.lower() == ".json":
        text = json.dumps(payload, indent=2)
    else:
        text = yaml.safe_dump(payload, sort_keys=False)
    path.write_text(text, encoding="utf-8")


def update_rates(
    config: AppConfig, rates: Mapping[str, float], today: date | None = None
) -> AppConfig:
    """
    Return a config with edited rates and a refreshed ``last_updated``.

    Raises:
        ConfigError: If any rate is not positive and finite
    """
    return replace(
        config,
        rates=config.rates.update(rates),
        last_updated=today or date.today(),
    )


def _read(path: Path, format: str | None) -> dict[str, Any]:
    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    if fmt in {"yaml", "yml", ""}:
        data = yaml.safe_load(text)
    elif fmt == "json":
        data = json.loads(text)
    else:
        raise ConfigError(f"Unsupported config format '{fmt}' for {path}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping (source={path})")
    return data


def _coerce_date(value: Any, ctx: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ConfigError(f"{ctx}: invalid ISO date '{value}'") from exc
    raise ConfigError(f"{ctx}: expected ISO date string")
