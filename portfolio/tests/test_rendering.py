import unittest

from portfolio.rendering import (
    PlaceholderShape,
    SectionState,
    SectionStatus,
    load_section,
    state_from_result,
)


class SectionStateTests(unittest.TestCase):
    def test_none_and_empty_list_are_empty(self):
        self.assertTrue(state_from_result(None, "Nothing.").is_empty)
        state = state_from_result([], "No items.")
        self.assertEqual(state.status, SectionStatus.EMPTY)
        self.assertEqual(state.message, "No items.")

    def test_records_are_populated(self):
        state = state_from_result([1, 2], "No items.")
        self.assertTrue(state.is_populated)
        self.assertEqual(state.data, [1, 2])

    def test_loading_carries_shape_and_source(self):
        shape = PlaceholderShape(items=2, lines=("70%", "30%"))
        state = SectionState.loading(shape, src="/sections/education")
        self.assertTrue(state.is_loading)
        self.assertEqual(state.shape.items, 2)
        self.assertEqual(state.src, "/sections/education")


class LoadSectionTests(unittest.IsolatedAsyncioTestCase):
    async def test_successful_fetch(self):
        async def fetch():
            return ["a"]

        state = await load_section("things", fetch, "No things.")
        self.assertTrue(state.is_populated)

    async def test_failure_is_contained_and_logged(self):
        async def fetch():
            raise RuntimeError("store unavailable")

        with self.assertLogs("portfolio.rendering", level="ERROR") as logs:
            state = await load_section("things", fetch, "No things.")

        self.assertTrue(state.is_failed)
        self.assertEqual(state.message, "Could not load this section.")
        self.assertIn("things", logs.output[0])


if __name__ == "__main__":
    unittest.main()
