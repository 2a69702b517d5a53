from flask import jsonify

from adwsus_recon.logger_config import logger


def to_records(frame):
    """DataFrame -> JSON-safe list of dicts (NaN/NaT become None)."""
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")


def handler(frame, message, report):
    records = to_records(frame)
    logger.info("Report '%s' sent as API (%d rows)", report, len(records))
    return jsonify(
        {
            "isSuccess": len(records) > 0,
            "data": records,
            "message": message,
            "report": report,
        }
    )
