import unittest

from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from adwsus_recon.config import ReconConfig
from adwsus_recon.db_connector import wsus_database_url
from adwsus_recon.models import WSUS_COLUMNS
from adwsus_recon.wsus_service import WsusService


def make_engine(rows):
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE vComputerTarget ("
                "ComputerTargetId TEXT, Name TEXT, IPAddress TEXT, "
                "LastSyncTime TEXT, LastSyncResult INTEGER, LastReportedStatusTime TEXT)"
            )
        )
        for row in rows:
            connection.execute(
                text(
                    "INSERT INTO vComputerTarget VALUES "
                    "(:id, :name, :ip, :sync, :result, :status)"
                ),
                row,
            )
    return engine


class TestWsusService(unittest.TestCase):
    def test_get_computer_targets(self):
        engine = make_engine(
            [
                {
                    "id": "1",
                    "name": "a.corp.local",
                    "ip": "10.0.0.1",
                    "sync": "2024-05-01 10:00:00",
                    "result": 1,
                    "status": "2024-05-01 10:05:00",
                },
                {
                    "id": "2",
                    "name": "b.corp.local",
                    "ip": "10.0.0.2",
                    "sync": None,
                    "result": 0,
                    "status": None,
                },
            ]
        )
        service = WsusService(engine, view="vComputerTarget")
        df = service.get_computer_targets()
        service.close()

        self.assertEqual(list(df.columns), WSUS_COLUMNS)
        self.assertEqual(df["FullDomainName"].tolist(), ["a.corp.local", "b.corp.local"])
        self.assertEqual(df.loc[0, "IPAddress"], "10.0.0.1")

    def test_empty_view(self):
        service = WsusService(make_engine([]), view="vComputerTarget")
        df = service.get_computer_targets()
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), WSUS_COLUMNS)

    def test_missing_view_raises(self):
        service = WsusService(make_engine([]), view="NoSuchView")
        with self.assertRaises(Exception):
            service.get_computer_targets()


class TestDatabaseUrl(unittest.TestCase):
    def test_explicit_url_wins(self):
        config = ReconConfig(wsus_db_url="sqlite:///susdb.sqlite")
        self.assertEqual(wsus_database_url(config), "sqlite:///susdb.sqlite")

    def test_derived_url(self):
        url = wsus_database_url(ReconConfig(wsus_server="wsus01", wsus_use_ssl=True))
        self.assertEqual(url.drivername, "mssql+pyodbc")
        self.assertEqual(url.host, "wsus01")
        self.assertEqual(url.database, "SUSDB")
        self.assertEqual(url.query["Encrypt"], "yes")


if __name__ == "__main__":
    unittest.main()
