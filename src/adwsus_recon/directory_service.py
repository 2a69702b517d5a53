import pandas as pd
from ldap3 import ALL, NTLM, SIMPLE, SUBTREE, Connection, Server

from adwsus_recon.logger_config import logger
from adwsus_recon.models import (
    ACCOUNTDISABLE,
    AD_COLUMNS,
    AD_DN,
    AD_ENABLED,
    AD_HOSTNAME,
    AD_NAME,
    AD_OS,
    empty_directory_frame,
)

ATTRIBUTES = [
    "name",
    "dNSHostName",
    "operatingSystem",
    "userAccountControl",
    "distinguishedName",
]


# stays below the default AD MaxPageSize of 1000
PAGE_SIZE = 500


class DirectoryQueryError(Exception):
    pass


def check_result(result, search_base):
    """Raise unless the last LDAP operation ended with resultCode 0 (success).

    A truncated search (sizeLimitExceeded) or a missing search base
    (noSuchObject) is a failed query, not an empty inventory.
    """
    result = result or {}
    if result.get("result", 0) != 0:
        raise DirectoryQueryError(
            f"AD search under '{search_base}' failed: "
            f"{result.get('description')} ({result.get('result')}) "
            f"{result.get('message') or ''}".rstrip()
        )


def connect_directory(config):
    """Open a bound ldap3 connection to the configured domain controller."""
    server = Server(config.ad_server, use_ssl=config.ad_use_ssl, get_info=ALL)
    if config.ad_user and "\\" in config.ad_user:
        authentication = NTLM
    else:
        authentication = SIMPLE
    logger.info("Connecting to AD server '%s'", config.ad_server)
    return Connection(
        server,
        user=config.ad_user,
        password=config.ad_password,
        authentication=authentication if config.ad_user else None,
        auto_bind=True,
    )


def _first(value):
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _is_enabled(user_account_control):
    try:
        flags = int(_first(user_account_control))
    except (TypeError, ValueError):
        # accounts without readable flags are treated as enabled
        return True
    return not flags & ACCOUNTDISABLE


class DirectoryService:
    """Reads computer accounts from Active Directory."""

    def __init__(self, connection, search_base):
        self.connection = connection
        self.search_base = search_base

    def get_computers(self, os_filter="*"):
        """All computer accounts whose operatingSystem matches ``os_filter``.

        ``os_filter`` is an LDAP wildcard such as ``*`` or ``*Server*``.
        """
        search_filter = f"(&(objectClass=computer)(operatingSystem={os_filter}))"
        logger.info("Searching AD under '%s' with %s", self.search_base, search_filter)
        entries = self.connection.extend.standard.paged_search(
            search_base=self.search_base,
            search_filter=search_filter,
            search_scope=SUBTREE,
            attributes=ATTRIBUTES,
            paged_size=PAGE_SIZE,
            generator=False,
        )
        check_result(self.connection.result, self.search_base)

        rows = []
        for entry in entries or []:
            if entry.get("type", "searchResEntry") != "searchResEntry":
                continue
            attributes = entry.get("attributes", {})
            rows.append(
                {
                    AD_NAME: _first(attributes.get("name")) or "",
                    AD_HOSTNAME: _first(attributes.get("dNSHostName")) or "",
                    AD_OS: _first(attributes.get("operatingSystem")) or "",
                    AD_ENABLED: _is_enabled(attributes.get("userAccountControl")),
                    AD_DN: entry.get("dn")
                    or _first(attributes.get("distinguishedName"))
                    or "",
                }
            )

        if not rows:
            logger.warning("No computer accounts found in AD for filter %s", search_filter)
            return empty_directory_frame()

        logger.info("Fetched %d computer accounts from AD", len(rows))
        return pd.DataFrame(rows, columns=AD_COLUMNS)

    def close(self):
        self.connection.unbind()
