"""Record layouts shared by the sources, the reconciler and the exporters.

Both inventories travel as ``pandas.DataFrame`` objects with one row per
computer. The column names below are the contract between modules.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pandas as pd

# Directory (Active Directory) computer accounts
AD_NAME = "Name"
AD_HOSTNAME = "DNSHostName"
AD_OS = "OperatingSystem"
AD_ENABLED = "Enabled"
AD_DN = "DistinguishedName"
AD_COLUMNS = [AD_NAME, AD_HOSTNAME, AD_OS, AD_ENABLED, AD_DN]

# Patch server (WSUS) computer targets
WSUS_HOSTNAME = "FullDomainName"
WSUS_IP = "IPAddress"
WSUS_LAST_SYNC = "LastSyncTime"
WSUS_SYNC_RESULT = "LastSyncResult"
WSUS_LAST_STATUS = "LastReportedStatusTime"
WSUS_COLUMNS = [
    WSUS_HOSTNAME,
    WSUS_IP,
    WSUS_LAST_SYNC,
    WSUS_SYNC_RESULT,
    WSUS_LAST_STATUS,
]

# userAccountControl ACCOUNTDISABLE flag
ACCOUNTDISABLE = 0x2


class ScopeFilter(Enum):
    ALL = "All"
    SERVERS = "Servers"
    COMPUTERS = "Computers"

    @classmethod
    def parse(cls, value):
        """Accept an enum member or its name in any case ("servers" -> SERVERS)."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown scope {value!r}; expected one of: {choices}")


def empty_directory_frame():
    return pd.DataFrame(
        {
            AD_NAME: pd.Series(dtype="object"),
            AD_HOSTNAME: pd.Series(dtype="object"),
            AD_OS: pd.Series(dtype="object"),
            AD_ENABLED: pd.Series(dtype="bool"),
            AD_DN: pd.Series(dtype="object"),
        }
    )


def empty_wsus_frame():
    return pd.DataFrame({col: pd.Series(dtype="object") for col in WSUS_COLUMNS})


@dataclass
class ReconResult:
    """Outcome of one run: both reports on success, the cause on failure."""

    ok: bool
    missing_from_wsus: Optional[pd.DataFrame] = None
    stale_in_wsus: Optional[pd.DataFrame] = None
    output_files: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, missing_from_wsus, stale_in_wsus, output_files):
        return cls(
            ok=True,
            missing_from_wsus=missing_from_wsus,
            stale_in_wsus=stale_in_wsus,
            output_files=list(output_files),
        )

    @classmethod
    def failure(cls, error):
        return cls(ok=False, error=str(error))
