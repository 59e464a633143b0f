import unittest

import httpx

from leadscraper.http_client import HttpExecutor
from leadscraper.site_crawler import SiteCrawler, normalize_url


async def _no_sleep(_seconds: float) -> None:
    return None


class NormalizeUrlTestCase(unittest.TestCase):
    def test_adds_default_scheme(self) -> None:
        self.assertEqual(normalize_url("  biz.com "), "http://biz.com")

    def test_keeps_existing_scheme(self) -> None:
        self.assertEqual(normalize_url("HTTPS://biz.com/home"), "HTTPS://biz.com/home")

    def test_blank_input(self) -> None:
        self.assertIsNone(normalize_url(None))
        self.assertIsNone(normalize_url("   "))


class SiteCrawlerTestCase(unittest.IsolatedAsyncioTestCase):
    async def _crawl(self, handler, website: str, **kwargs) -> tuple[list[str], list[str]]:
        fetched: list[str] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            fetched.append(request.url.path)
            return handler(request)

        executor = HttpExecutor(transport=httpx.MockTransport(recording_handler), max_retries=0, sleep=_no_sleep)
        crawler = SiteCrawler(executor, sleep=_no_sleep, **kwargs)
        try:
            emails = await crawler.crawl(website)
        finally:
            await executor.aclose()
        return emails, fetched

    async def test_stops_at_first_path_with_emails(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/contact":
                return httpx.Response(200, text='<a href="mailto:info@biz.com">Email</a>')
            return httpx.Response(200, text="<p>Welcome</p>")

        emails, fetched = await self._crawl(handler, "biz.com")

        self.assertEqual(emails, ["info@biz.com"])
        self.assertEqual(fetched, ["/", "/contact"])

    async def test_unreachable_paths_are_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/about":
                return httpx.Response(200, text="<p>Write to team@biz.com</p>")
            if request.url.path == "/":
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(404)

        emails, fetched = await self._crawl(handler, "http://biz.com")

        self.assertEqual(emails, ["team@biz.com"])
        self.assertEqual(fetched, ["/", "/contact", "/contact-us", "/about"])

    async def test_exhausting_paths_returns_empty(self) -> None:
        emails, fetched = await self._crawl(lambda request: httpx.Response(200, text="<p>none</p>"), "biz.com")

        self.assertEqual(emails, [])
        self.assertEqual(fetched, ["/", "/contact", "/contact-us", "/about", "/about-us", "/company", "/info"])

    async def test_duplicate_resolved_urls_fetched_once(self) -> None:
        emails, fetched = await self._crawl(
            lambda request: httpx.Response(200, text=""),
            "https://biz.com/",
            paths=("/", "", "/contact", "/contact"),
        )

        self.assertEqual(emails, [])
        self.assertEqual(fetched, ["/", "/contact"])

    async def test_pause_between_paths(self) -> None:
        delays: list[float] = []

        async def sleep(seconds: float) -> None:
            delays.append(seconds)

        executor = HttpExecutor(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="")),
            max_retries=0,
            sleep=_no_sleep,
        )
        crawler = SiteCrawler(executor, paths=("/", "/contact"), path_delay=0.25, sleep=sleep)
        try:
            await crawler.crawl("biz.com")
        finally:
            await executor.aclose()

        self.assertEqual(delays, [0.25, 0.25])

    async def test_missing_website(self) -> None:
        emails, fetched = await self._crawl(lambda request: httpx.Response(200), "")
        self.assertEqual(emails, [])
        self.assertEqual(fetched, [])


if __name__ == "__main__":
    unittest.main()
