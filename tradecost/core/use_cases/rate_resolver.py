import logging
import re
from typing import Optional

from tradecost.core.entities.rates import DEFAULT_RATES, RateSchedule
from tradecost.core.interfaces.datasource import IDataSource

logger = logging.getLogger(__name__)

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def resolve_rates(overrides: Optional[dict] = None) -> RateSchedule:
    """
    Defaults merged with whatever the user saved.
    Accepts both snake_case and camelCase keys; unknown keys and nulls are ignored.
    """
    merged = dict(DEFAULT_RATES)
    for key, value in (overrides or {}).items():
        name = _snake(str(key))
        if name in DEFAULT_RATES and value is not None:
            merged[name] = value
    return RateSchedule(**merged)


def _rate_text(value: float) -> str:
    # Shortest text that parses back to the same float
    return str(int(value)) if value.is_integer() else repr(value)


def rates_to_payload(rates: RateSchedule) -> dict:
    """Backend stores rates the way the settings form submits them: as strings."""
    payload = {"brokerage_mode": rates.brokerage_mode.value}
    for key, value in rates.model_dump(exclude={"brokerage_mode"}).items():
        payload[key] = _rate_text(value)
    return payload


async def load_rates(source: IDataSource, user: str) -> RateSchedule:
    if not user:
        return resolve_rates()
    saved = await source.get_rates(user)
    if saved is None:
        logger.info(f"No brokerage settings for {user}; using defaults.")
    return resolve_rates(saved)
