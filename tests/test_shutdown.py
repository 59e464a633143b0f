import asyncio
import os
import signal
import unittest

from leadscraper.shutdown import ShutdownCoordinator


class ShutdownCoordinatorTestCase(unittest.TestCase):
    def test_request_sets_flag_once(self) -> None:
        coordinator = ShutdownCoordinator()
        self.assertFalse(coordinator.requested)
        coordinator.request("first")
        coordinator.request("second")
        self.assertTrue(coordinator.requested)
        self.assertEqual(coordinator.reason, "first")


@unittest.skipUnless(hasattr(signal, "SIGTERM") and os.name == "posix", "POSIX signals required")
class ShutdownSignalTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_sigterm_requests_shutdown(self) -> None:
        coordinator = ShutdownCoordinator()
        coordinator.install()
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            for _ in range(50):
                if coordinator.requested:
                    break
                await asyncio.sleep(0.01)
        finally:
            coordinator.uninstall()

        self.assertTrue(coordinator.requested)
        self.assertIn("SIGTERM", coordinator.reason)


if __name__ == "__main__":
    unittest.main()
