"""
Pricing configuration
=====================
Environment-driven settings for the package price engine.

Variables (a local .env file is loaded first if present):
  PRICING_VAT_ENABLED           true/false (default false)
  PRICING_VAT_RATE              percent (default 14)
  PRICING_SERVICE_FEE_ENABLED   true/false (default false)
  PRICING_SERVICE_FEE_RATE      percent (default 2)
  PRICING_MINIMUM_SERVICE_FEE   amount (default 50)
  LOG_LEVEL                     DEBUG / INFO / WARNING / ERROR (default INFO)
"""

from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional
import logging
import os

from dotenv import load_dotenv

from package_pricing import FeeSettings, InvalidConfigurationError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(f"{name} must be true/false, got {raw!r}")


def _env_decimal(env: Mapping[str, str], name: str, default: str) -> Decimal:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return Decimal(default)
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise InvalidConfigurationError(f"{name} must be a number, got {raw!r}")
    if not value.is_finite() or value < 0:
        raise InvalidConfigurationError(f"{name} must be a non-negative number, got {raw!r}")
    return value


def load_fee_settings(env: Optional[Mapping[str, str]] = None) -> FeeSettings:
    """
    Build FeeSettings from the environment.

    Args:
        env: mapping to read instead of os.environ (the .env file is only
             loaded when reading os.environ)

    Raises:
        InvalidConfigurationError: a flag or rate cannot be parsed
    """
    if env is None:
        load_dotenv()
        env = os.environ

    settings = FeeSettings(
        vat_enabled=_env_flag(env, 'PRICING_VAT_ENABLED', False),
        vat_rate=_env_decimal(env, 'PRICING_VAT_RATE', '14'),
        service_fee_enabled=_env_flag(env, 'PRICING_SERVICE_FEE_ENABLED', False),
        service_fee_rate=_env_decimal(env, 'PRICING_SERVICE_FEE_RATE', '2'),
        minimum_service_fee=_env_decimal(env, 'PRICING_MINIMUM_SERVICE_FEE', '50'),
    )
    logger.info(
        f"Fee settings: vat={settings.vat_enabled} ({settings.vat_rate}%), "
        f"service_fee={settings.service_fee_enabled} ({settings.service_fee_rate}%, "
        f"min {settings.minimum_service_fee})"
    )
    return settings


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO))
