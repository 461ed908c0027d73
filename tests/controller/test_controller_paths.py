import unittest

from gsreconcile.controller import paths


class TestPaths(unittest.TestCase):
    def test_server_paths(self) -> None:
        self.assertEqual(paths.server("S"), "/objects/servers/S")
        self.assertEqual(paths.server_power("S"), "/objects/servers/S/power")
        self.assertEqual(paths.server_shutdown("S"), "/objects/servers/S/shutdown")

    def test_relation_paths(self) -> None:
        self.assertEqual(paths.server_relation("S", "ips"), "/objects/servers/S/ips")
        self.assertEqual(
            paths.server_relation("S", "storages", "D"), "/objects/servers/S/storages/D"
        )

    def test_object_paths(self) -> None:
        self.assertEqual(paths.ip("I"), "/objects/ips/I")
        self.assertEqual(paths.request("R"), "/requests/R")


if __name__ == "__main__":
    unittest.main()
