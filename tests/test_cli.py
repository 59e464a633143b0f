import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from leadscraper import cli
from leadscraper.pipeline import RunSummary


class BuildConfigTestCase(unittest.TestCase):
    def test_flags_override_environment(self) -> None:
        args = cli.build_arg_parser().parse_args(
            [
                "--output",
                "leads.csv",
                "--max-pages",
                "3",
                "--site-concurrency",
                "2",
                "--categories",
                "bakeries,florists",
                "--skip-website-crawl",
                "--no-phone",
            ]
        )

        config = cli.build_config(args, env={"MAX_PAGES": "7", "OUTPUT_FILE": "env.csv"})

        self.assertEqual(config.output_path, Path("leads.csv"))
        self.assertEqual(config.max_pages, 3)
        self.assertEqual(config.rate_limit.site_concurrency, 2)
        self.assertEqual(config.categories, ("bakeries", "florists"))
        self.assertTrue(config.skip_website_crawl)
        self.assertFalse(config.include_phone)

    def test_required_key_missing_raises(self) -> None:
        args = cli.build_arg_parser().parse_args(["--require-api-key"])
        with self.assertRaises(ValueError):
            cli.build_config(args, env={})


class MainTestCase(unittest.TestCase):
    def test_missing_required_key_exits_with_config_code(self) -> None:
        with patch.dict(os.environ, {}, clear=True), patch.object(cli, "run_pipeline") as run_pipeline:
            self.assertEqual(cli.main(["--require-api-key"]), cli.EXIT_CONFIG)
        run_pipeline.assert_not_called()

    def test_invalid_number_exits_with_config_code(self) -> None:
        with patch.dict(os.environ, {"MAX_RETRIES": "many"}, clear=True):
            self.assertEqual(cli.main([]), cli.EXIT_CONFIG)

    def test_fatal_error_exits_with_failure_code(self) -> None:
        async def explode(config):
            raise RuntimeError("boom")

        with TemporaryDirectory() as tmpdir, patch.dict(os.environ, {}, clear=True), patch.object(
            cli, "run_pipeline", side_effect=explode
        ):
            with self.assertLogs("leadscraper.cli", level="ERROR"):
                code = cli.main(["--output", str(Path(tmpdir) / "out.csv")])

        self.assertEqual(code, cli.EXIT_FATAL)

    def test_successful_run(self) -> None:
        async def finish(config):
            return RunSummary(stats={"tasks_completed": 0}, interrupted=False)

        with patch.dict(os.environ, {}, clear=True), patch.object(cli, "run_pipeline", side_effect=finish):
            self.assertEqual(cli.main([]), cli.EXIT_OK)


if __name__ == "__main__":
    unittest.main()
