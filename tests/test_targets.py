import unittest

from leadscraper.models import Location, Task
from leadscraper.targets import DEFAULT_CATEGORIES, DEFAULT_STATE_CITY_MAP, build_tasks, parse_state_list


class BuildTasksTestCase(unittest.TestCase):
    def test_locations_outer_categories_inner(self) -> None:
        tasks = build_tasks({"IL": ["Springfield", "Peoria"], "OH": ["Columbus"]}, ["bakeries", "florists"])

        self.assertEqual(
            tasks,
            [
                Task(location=Location("Springfield", "IL"), category="bakeries"),
                Task(location=Location("Springfield", "IL"), category="florists"),
                Task(location=Location("Peoria", "IL"), category="bakeries"),
                Task(location=Location("Peoria", "IL"), category="florists"),
                Task(location=Location("Columbus", "OH"), category="bakeries"),
                Task(location=Location("Columbus", "OH"), category="florists"),
            ],
        )

    def test_defaults(self) -> None:
        city_count = sum(len(cities) for cities in DEFAULT_STATE_CITY_MAP.values())
        self.assertEqual(len(DEFAULT_STATE_CITY_MAP), 50)
        self.assertEqual(len(build_tasks()), city_count * len(DEFAULT_CATEGORIES))


class ParseStateListTestCase(unittest.TestCase):
    def test_non_object_is_ignored(self) -> None:
        with self.assertLogs("leadscraper.targets", level="WARNING"):
            self.assertIsNone(parse_state_list('["IL"]'))

    def test_empty(self) -> None:
        self.assertIsNone(parse_state_list(None))


if __name__ == "__main__":
    unittest.main()
