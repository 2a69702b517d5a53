import unittest
from unittest import mock

from ldap3 import MOCK_SYNC, Connection, Server

from adwsus_recon.directory_service import (
    DirectoryQueryError,
    DirectoryService,
    _first,
    _is_enabled,
)
from adwsus_recon.models import AD_COLUMNS

BASE = "dc=corp,dc=local"
ADMIN = "cn=admin,dc=corp,dc=local"


def mock_connection():
    conn = Connection(
        Server("fake_dc"), user=ADMIN, password="secret", client_strategy=MOCK_SYNC
    )
    conn.strategy.add_entry(ADMIN, {"userPassword": "secret", "sn": "admin"})
    computer(conn, "APP01", "app01.corp.local", "Windows Server 2019", "4096")
    computer(conn, "WS01", "ws01.corp.local", "Windows 10 Enterprise", "4098")
    conn.bind()
    return conn


def computer(conn, name, host, os_name, uac):
    conn.strategy.add_entry(
        f"cn={name},ou=Computers,{BASE}",
        {
            "objectClass": ["top", "computer"],
            "name": name,
            "dNSHostName": host,
            "operatingSystem": os_name,
            "userAccountControl": uac,
        },
    )


class TestDirectoryService(unittest.TestCase):
    def setUp(self):
        self.conn = mock_connection()
        self.service = DirectoryService(self.conn, BASE)

    def tearDown(self):
        self.service.close()

    def test_get_computers(self):
        df = self.service.get_computers("*")
        self.assertEqual(list(df.columns), AD_COLUMNS)
        rows = df.set_index("DNSHostName")
        self.assertEqual(sorted(rows.index), ["app01.corp.local", "ws01.corp.local"])
        self.assertTrue(rows.loc["app01.corp.local", "Enabled"])
        self.assertFalse(rows.loc["ws01.corp.local", "Enabled"])
        self.assertEqual(rows.loc["ws01.corp.local", "OperatingSystem"], "Windows 10 Enterprise")

    def test_no_match_returns_empty_frame(self):
        df = self.service.get_computers("Linux")
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), AD_COLUMNS)

    def test_unknown_search_base_raises(self):
        service = DirectoryService(self.conn, "ou=Typo,dc=nope,dc=local")
        with self.assertRaises(DirectoryQueryError):
            service.get_computers("*")


class TestSearchResult(unittest.TestCase):
    def make_service(self, result):
        conn = mock.Mock()
        conn.extend.standard.paged_search.return_value = []
        conn.result = result
        return DirectoryService(conn, "dc=corp,dc=local"), conn

    def test_search_is_paged(self):
        service, conn = self.make_service({"result": 0, "description": "success"})
        self.assertTrue(service.get_computers().empty)
        kwargs = conn.extend.standard.paged_search.call_args.kwargs
        self.assertEqual(kwargs["paged_size"], 500)
        self.assertFalse(kwargs["generator"])

    def test_size_limit_is_a_failure(self):
        service, _ = self.make_service(
            {"result": 4, "description": "sizeLimitExceeded", "message": ""}
        )
        with self.assertRaises(DirectoryQueryError) as ctx:
            service.get_computers()
        self.assertIn("sizeLimitExceeded", str(ctx.exception))

    def test_insufficient_rights_is_a_failure(self):
        service, _ = self.make_service(
            {"result": 50, "description": "insufficientAccessRights", "message": ""}
        )
        with self.assertRaises(DirectoryQueryError):
            service.get_computers()


class TestAttributeHelpers(unittest.TestCase):
    def test_first(self):
        self.assertEqual(_first(["a", "b"]), "a")
        self.assertIsNone(_first([]))
        self.assertEqual(_first("a"), "a")

    def test_is_enabled(self):
        self.assertTrue(_is_enabled(4096))
        self.assertTrue(_is_enabled(["4096"]))
        self.assertFalse(_is_enabled("4098"))
        self.assertFalse(_is_enabled([514]))
        self.assertTrue(_is_enabled(None))


if __name__ == "__main__":
    unittest.main()
