"""Common utilities: config, logging, time."""

from agency_desk.common.config import AppConfig, load_config
from agency_desk.common.logging import bind_tenant, clear_tenant, get_logger, setup_logging
from agency_desk.common.time_utils import parse_date, today, utc_now

__all__ = [
    "AppConfig",
    "load_config",
    "setup_logging",
    "get_logger",
    "bind_tenant",
    "clear_tenant",
    "utc_now",
    "today",
    "parse_date",
]
