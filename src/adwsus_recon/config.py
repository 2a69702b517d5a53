"""Run configuration.

Values come from the built-in defaults, then the environment (a ``.env`` file
in the working directory is loaded first), then the command line.
"""

import argparse
import os
from dataclasses import dataclass, field, fields, replace
from typing import Optional

from dotenv import load_dotenv

from adwsus_recon.models import ScopeFilter

STALE_MODES = ("disabled", "any")

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ReconConfig:
    # WSUS server
    wsus_server: str = "localhost"
    wsus_port: int = 8530
    wsus_use_ssl: bool = False
    wsus_db_url: Optional[str] = None

    # Active Directory
    ad_server: str = "localhost"
    ad_user: Optional[str] = None
    ad_password: Optional[str] = field(default=None, repr=False)
    ad_search_base: str = ""
    ad_use_ssl: bool = False
    os_filter: str = "*"

    # Comparison
    scope: ScopeFilter = ScopeFilter.ALL
    stale_mode: str = "disabled"
    ignore_case: bool = False

    # Output
    output_dir: str = "Output"
    missing_file: str = "AD_Computers_Missing_From_WSUS.csv"
    stale_file: str = "WSUS_Computers_Disabled_In_AD.csv"
    show: bool = False
    verbose: bool = False
    log_dir: str = "logs"

    @property
    def wsus_endpoint(self):
        scheme = "https" if self.wsus_use_ssl else "http"
        return f"{scheme}://{self.wsus_server}:{self.wsus_port}"

    @property
    def missing_path(self):
        return os.path.join(self.output_dir, self.missing_file)

    @property
    def stale_path(self):
        return os.path.join(self.output_dir, self.stale_file)

    def validate(self):
        if not 0 < self.wsus_port < 65536:
            raise ConfigError(f"WSUS port out of range: {self.wsus_port}")
        if self.stale_mode not in STALE_MODES:
            raise ConfigError(
                f"Unknown stale mode {self.stale_mode!r}; expected one of: "
                + ", ".join(STALE_MODES)
            )
        if not self.missing_file or not self.stale_file:
            raise ConfigError("Output file names must not be empty")
        if self.missing_file == self.stale_file:
            raise ConfigError("The two output files must have different names")
        return self


# environment variable -> (field, converter)
ENV_VARS = {
    "WSUS_SERVER": ("wsus_server", str),
    "WSUS_PORT": ("wsus_port", "int"),
    "WSUS_USE_SSL": ("wsus_use_ssl", "bool"),
    "WSUS_DB_URL": ("wsus_db_url", str),
    "AD_SERVER": ("ad_server", str),
    "AD_USER": ("ad_user", str),
    "AD_PASSWORD": ("ad_password", str),
    "AD_SEARCH_BASE": ("ad_search_base", str),
    "AD_USE_SSL": ("ad_use_ssl", "bool"),
    "AD_OS_FILTER": ("os_filter", str),
    "RECON_SCOPE": ("scope", "scope"),
    "RECON_STALE_MODE": ("stale_mode", str),
    "RECON_IGNORE_CASE": ("ignore_case", "bool"),
    "RECON_OUTPUT_DIR": ("output_dir", str),
    "RECON_MISSING_FILE": ("missing_file", str),
    "RECON_STALE_FILE": ("stale_file", str),
    "RECON_LOG_DIR": ("log_dir", str),
}


def _convert(name, value, kind):
    if kind == "bool":
        text = str(value).strip().lower()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        raise ConfigError(f"{name}: expected a boolean, got {value!r}")
    if kind == "int":
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"{name}: expected an integer, got {value!r}") from None
    if kind == "scope":
        try:
            return ScopeFilter.parse(value)
        except ValueError as e:
            raise ConfigError(f"{name}: {e}") from None
    return kind(value)


def from_env(environ=None, base=None):
    """Overlay the recognised environment variables on ``base``."""
    environ = os.environ if environ is None else environ
    base = base or ReconConfig()
    changes = {}
    for var, (field_name, kind) in ENV_VARS.items():
        if var in environ:
            changes[field_name] = _convert(var, environ[var], kind)
    return replace(base, **changes)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="adwsus-recon",
        description=(
            "Compare Active Directory computer accounts with WSUS computer "
            "targets and export the differences as CSV."
        ),
    )
    wsus = parser.add_argument_group("WSUS")
    wsus.add_argument("--wsus-server", help="WSUS server name (default: localhost)")
    wsus.add_argument("--wsus-port", type=int, help="WSUS port (default: 8530)")
    wsus.add_argument(
        "--wsus-use-ssl", action="store_true", default=None, help="Connect using TLS"
    )
    wsus.add_argument(
        "--wsus-db-url", help="SQLAlchemy URL of the WSUS database (SUSDB)"
    )

    ad = parser.add_argument_group("Active Directory")
    ad.add_argument("--ad-server", help="Domain controller (default: localhost)")
    ad.add_argument("--ad-user", help="Bind user, DOMAIN\\user or a DN")
    ad.add_argument("--ad-search-base", help="Search base DN")
    ad.add_argument(
        "--ad-use-ssl", action="store_true", default=None, help="Use LDAPS"
    )
    ad.add_argument(
        "--os-filter", help="operatingSystem wildcard for the search (default: *)"
    )

    recon = parser.add_argument_group("Comparison")
    recon.add_argument(
        "--scope",
        choices=[s.value for s in ScopeFilter],
        type=lambda v: ScopeFilter.parse(v).value,
        help="Which AD computers to check against WSUS (default: All)",
    )
    recon.add_argument(
        "--stale-mode",
        choices=STALE_MODES,
        help="disabled: WSUS targets whose AD account is disabled (default); "
        "any: WSUS targets without an enabled AD account",
    )
    recon.add_argument(
        "--ignore-case",
        action="store_true",
        default=None,
        help="Compare host names case-insensitively",
    )

    out = parser.add_argument_group("Output")
    out.add_argument("--output-dir", help="Output directory (default: Output)")
    out.add_argument("--missing-file", help="CSV for AD computers missing from WSUS")
    out.add_argument("--stale-file", help="CSV for WSUS computers disabled in AD")
    out.add_argument("--log-dir", help="Log directory (default: logs)")
    out.add_argument(
        "--show", action="store_true", default=None, help="Open the result viewer"
    )
    out.add_argument(
        "-v", "--verbose", action="store_true", default=None, help="Log to console"
    )
    return parser


def load_config(argv=None, environ=None, use_dotenv=True):
    """Build a validated ``ReconConfig``; raises ``ConfigError`` on bad values."""
    if use_dotenv and environ is None:
        load_dotenv()
    args = build_parser().parse_args(argv)
    config = from_env(environ)

    names = {f.name for f in fields(ReconConfig)}
    changes = {
        key: value
        for key, value in vars(args).items()
        if key in names and value is not None
    }
    if "scope" in changes:
        changes["scope"] = ScopeFilter.parse(changes["scope"])
    return replace(config, **changes).validate()
