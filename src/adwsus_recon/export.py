import os

from adwsus_recon.logger_config import logger


def ensure_output_dir(path):
    if not os.path.isdir(path):
        logger.info("Creating output directory '%s'", path)
    os.makedirs(path, exist_ok=True)
    return path


def export_csv(frame, path):
    """Header row, one record per line, UTF-8, no index column."""
    frame.to_csv(path, index=False, encoding="utf-8")
    logger.info("Wrote %d rows to '%s'", len(frame), path)
    return path


def export_reports(reports):
    """Write every ``(frame, path)`` pair, or none of them.

    Each report is written next to its target first. Existing targets are
    moved aside before the new files are moved into place, and put back if
    any step fails, so a failed run leaves the previous reports untouched.
    """
    staged = []
    backups = []
    placed = []
    try:
        for frame, path in reports:
            tmp_path = path + ".tmp"
            staged.append((tmp_path, path))
            export_csv(frame, tmp_path)
        for _, path in staged:
            if os.path.exists(path):
                os.replace(path, path + ".bak")
                backups.append((path + ".bak", path))
        for tmp_path, path in staged:
            os.replace(tmp_path, path)
            placed.append(path)
    except Exception:
        logger.error("Export failed, restoring previous reports")
        for path in placed:
            os.remove(path)
        for bak_path, path in backups:
            os.replace(bak_path, path)
        for tmp_path, _ in staged:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        raise
    for bak_path, _ in backups:
        os.remove(bak_path)
    return [path for _, path in staged]
