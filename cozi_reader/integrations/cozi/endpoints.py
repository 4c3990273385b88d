"""
Cozi REST endpoint paths

Paths are relative to the configured base URL (``.../api/ext/``) and start
with the API version segment.
"""
from ...utils.config import ConfigDefaults


def login(version: str = ConfigDefaults.LOGIN_API_VERSION) -> str:
    return f"{version}/auth/login"


def lists(account_id: str, version: str = ConfigDefaults.RESOURCE_API_VERSION) -> str:
    return f"{version}/{account_id}/list/"


def list_by_id(account_id: str, list_id: str, version: str = ConfigDefaults.RESOURCE_API_VERSION) -> str:
    return f"{version}/{account_id}/list/{list_id}"


def calendar_month(
    account_id: str,
    year: int,
    month: int,
    version: str = ConfigDefaults.RESOURCE_API_VERSION
) -> str:
    return f"{version}/{account_id}/calendar/{year:04d}/{month:02d}"


def calendar_item(account_id: str, item_id: str, version: str) -> str:
    return f"{version}/{account_id}/calendar/item/{item_id}"


def people(account_id: str, version: str = ConfigDefaults.RESOURCE_API_VERSION) -> str:
    return f"{version}/{account_id}/account/person/"
