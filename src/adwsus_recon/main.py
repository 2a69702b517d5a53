import sys

from adwsus_recon.config import ConfigError, build_parser, load_config
from adwsus_recon.db_connector import get_db_connection
from adwsus_recon.directory_service import DirectoryService, connect_directory
from adwsus_recon.export import ensure_output_dir, export_reports
from adwsus_recon.logger_config import configure_logging, logger
from adwsus_recon.models import ReconResult
from adwsus_recon.reconciliation import reconcile
from adwsus_recon.wsus_service import WsusService


def fetch_inventories(config, directory=None, wsus=None):
    """Both inventories as DataFrames; sources not passed in are opened here."""
    own_directory = directory is None
    own_wsus = wsus is None
    try:
        if own_directory:
            directory = DirectoryService(
                connect_directory(config), config.ad_search_base
            )
        ad_computers = directory.get_computers(config.os_filter)

        if own_wsus:
            logger.info("Connecting to WSUS server %s", config.wsus_endpoint)
            wsus = WsusService(get_db_connection(config))
        wsus_computers = wsus.get_computer_targets()
    finally:
        if own_directory and directory is not None:
            directory.close()
        if own_wsus and wsus is not None:
            wsus.close()
    return ad_computers, wsus_computers


def run(config, directory=None, wsus=None):
    try:
        logger.info("--------------------------------------------")
        logger.info("Entered Main Function...")

        ad_computers, wsus_computers = fetch_inventories(config, directory, wsus)
        result = reconcile(
            ad_computers,
            wsus_computers,
            scope=config.scope,
            stale_mode=config.stale_mode,
            ignore_case=config.ignore_case,
        )

        ensure_output_dir(config.output_dir)
        output_files = export_reports(
            [
                (result["missing_from_wsus"], config.missing_path),
                (result["stale_in_wsus"], config.stale_path),
            ]
        )
        logger.info("Reconciliation run finished")
        return ReconResult.success(
            result["missing_from_wsus"], result["stale_in_wsus"], output_files
        )

    except Exception as e:
        logger.error(
            "Error in run() against WSUS %s: %s", config.wsus_endpoint, str(e)
        )
        return ReconResult.failure(f"{type(e).__name__}: {e}")


STALE_TITLES = {
    "disabled": "WSUS computers disabled in AD",
    "any": "WSUS computers without an enabled AD account",
}


def report_views(result, stale_mode="disabled"):
    return {
        "missing": ("AD computers missing from WSUS", result.missing_from_wsus),
        "stale": (STALE_TITLES[stale_mode], result.stale_in_wsus),
    }


def cli(argv=None):
    try:
        config = load_config(argv)
    except ConfigError as e:
        build_parser().error(str(e))

    configure_logging(config.log_dir, config.verbose)
    result = run(config)
    if not result.ok:
        print(f"Reconciliation failed: {result.error}", file=sys.stderr)
        return 1

    views = report_views(result, config.stale_mode)
    for (title, frame), path in zip(views.values(), result.output_files):
        print(f"{title}: {len(frame)} -> {path}")

    if config.show:
        from adwsus_recon.app import show_reports

        show_reports(views)
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
