import unittest

import gsreconcile


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(gsreconcile, "ServerReconciler"))
        self.assertTrue(hasattr(gsreconcile, "PlanExecutor"))
        self.assertTrue(hasattr(gsreconcile, "GridscaleController"))
        self.assertTrue(hasattr(gsreconcile, "ApiConfig"))
        self.assertTrue(hasattr(gsreconcile, "RequestContext"))

        self.assertTrue(hasattr(gsreconcile, "OperationKind"))
        self.assertTrue(hasattr(gsreconcile, "ServerPlan"))
        self.assertTrue(hasattr(gsreconcile, "ServerSpec"))
        self.assertTrue(hasattr(gsreconcile, "ReconcileResult"))

        self.assertTrue(hasattr(gsreconcile, "GSReconcileError"))
        self.assertTrue(hasattr(gsreconcile, "RemoteCallError"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(gsreconcile, "__all__"))
        self.assertIn("ServerReconciler", gsreconcile.__all__)
        self.assertIn("GSReconcileError", gsreconcile.__all__)
        for name in gsreconcile.__all__:
            self.assertTrue(hasattr(gsreconcile, name), name)


if __name__ == "__main__":
    unittest.main()
