import pandas as pd

from adwsus_recon.logger_config import logger
from adwsus_recon.models import (
    AD_ENABLED,
    AD_HOSTNAME,
    AD_OS,
    WSUS_HOSTNAME,
    ScopeFilter,
)


def _keys(series, ignore_case):
    keys = series.astype("object").where(series.notna(), "").astype(str)
    if ignore_case:
        keys = keys.str.casefold()
    return keys


def _known(series, ignore_case):
    """Join keys to match against; missing or empty host names never match."""
    keys = _keys(series, ignore_case)
    return keys[keys != ""]


def is_server(directory):
    """True where the OS description contains "server" (any case)."""
    return (
        directory[AD_OS]
        .astype("object")
        .fillna("")
        .astype(str)
        .str.contains("server", case=False, regex=False)
    )


def filter_by_scope(directory, scope):
    scope = ScopeFilter.parse(scope)
    if scope is ScopeFilter.SERVERS:
        return directory[is_server(directory)]
    if scope is ScopeFilter.COMPUTERS:
        return directory[~is_server(directory)]
    return directory


def split_by_enabled(directory):
    enabled_mask = directory[AD_ENABLED].fillna(False).astype(bool)
    return directory[enabled_mask], directory[~enabled_mask]


def find_missing_from_patch_server(directory, patch_server, scope, ignore_case=False):
    """Directory computers in ``scope`` that WSUS does not know about."""
    scope = ScopeFilter.parse(scope)
    logger.info("Finding AD computers missing from WSUS (scope: %s)", scope.value)
    in_scope = filter_by_scope(directory, scope)

    known = _known(patch_server[WSUS_HOSTNAME], ignore_case)
    missing = in_scope[~_keys(in_scope[AD_HOSTNAME], ignore_case).isin(known)].copy()

    missing = missing.sort_values(AD_HOSTNAME, kind="mergesort").reset_index(drop=True)
    logger.info("%d of %d AD computers missing from WSUS", len(missing), len(in_scope))
    return missing


def find_stale_in_patch_server(directory, patch_server, ignore_case=False):
    """WSUS computers whose host name is not among the given directory accounts."""
    logger.info("Finding WSUS computers not present in AD")
    known = _known(directory[AD_HOSTNAME], ignore_case)
    keys = _keys(patch_server[WSUS_HOSTNAME], ignore_case)
    stale = patch_server[~keys.isin(known)].copy()

    stale = stale.sort_values(WSUS_HOSTNAME, kind="mergesort").reset_index(drop=True)
    logger.info("%d of %d WSUS computers not present in AD", len(stale), len(patch_server))
    return stale


def find_disabled_in_patch_server(directory, patch_server, ignore_case=False):
    """WSUS computers that have no enabled AD account but a disabled one."""
    enabled, disabled = split_by_enabled(directory)
    stale = find_stale_in_patch_server(enabled, patch_server, ignore_case)

    disabled_keys = _known(disabled[AD_HOSTNAME], ignore_case)
    result = stale[_keys(stale[WSUS_HOSTNAME], ignore_case).isin(disabled_keys)]
    logger.info("%d WSUS computers belong to disabled AD accounts", len(result))
    return result.reset_index(drop=True)


def reconcile(
    directory,
    patch_server,
    scope=ScopeFilter.ALL,
    stale_mode="disabled",
    ignore_case=False,
):
    logger.info("Reconciliation Starts")
    enabled, _ = split_by_enabled(directory)

    missing = find_missing_from_patch_server(enabled, patch_server, scope, ignore_case)
    if stale_mode == "disabled":
        stale = find_disabled_in_patch_server(directory, patch_server, ignore_case)
    elif stale_mode == "any":
        stale = find_stale_in_patch_server(enabled, patch_server, ignore_case)
    else:
        raise ValueError(f"Unknown stale mode: {stale_mode!r}")

    logger.info("Reconciliation Ends")
    return {"missing_from_wsus": missing, "stale_in_wsus": stale}
