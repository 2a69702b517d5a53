import pandas as pd
from sqlalchemy import text

from adwsus_recon.logger_config import logger
from adwsus_recon.models import WSUS_COLUMNS, empty_wsus_frame

# WSUS publishes its computer targets through the PUBLIC_VIEWS schema of SUSDB
DEFAULT_VIEW = "PUBLIC_VIEWS.vComputerTarget"


class WsusService:
    """Reads computer targets from the WSUS database."""

    def __init__(self, engine, view=DEFAULT_VIEW):
        self.engine = engine
        self.view = view

    def query(self):
        return f"""
            SELECT
                ct.Name AS FullDomainName,
                ct.IPAddress,
                ct.LastSyncTime,
                ct.LastSyncResult,
                ct.LastReportedStatusTime
            FROM {self.view} ct
        """

    def get_computer_targets(self):
        logger.info("Fetching computer targets from WSUS")
        with self.engine.connect() as connection:
            df = pd.read_sql(text(self.query()), con=connection)

        if df.empty:
            logger.warning("WSUS returned no computer targets")
            return empty_wsus_frame()

        logger.info("Fetched %d computer targets from WSUS", len(df))
        return df[WSUS_COLUMNS]

    def close(self):
        self.engine.dispose()
