"""
Tests for the diff between observed and desired filters.
"""

import difflib
import random

import numpy as np
import pytest

from filterctl.domain.enums import Category
from filterctl.filters.diff import (
    FiltersDiff,
    changed_filters,
    cost_matrix,
    diff_filters,
    reorder_with_mapping,
)
from tests.conftest import make_filter


def some_filters():
    return [
        make_filter(id="abcdefg", from_="someone@gmail.com", add_label="label1"),
        make_filter(id="qwerty", to="me@gmail.com", mark_read=True, add_label="label2"),
        make_filter(id="zxcvb", query="-{foobar baz}", mark_important=True),
    ]


# =============================================================================
# Set difference
# =============================================================================


class TestDiffFilters:
    def test_no_diff_ignores_ids(self):
        observed = [make_filter(id="abcdefg", from_="someone@gmail.com", mark_read=True)]
        desired = [make_filter(from_="someone@gmail.com", mark_read=True)]

        assert diff_filters(observed, desired).empty

    def test_added_only(self):
        observed = [make_filter(from_="a", archive=True)]
        desired = [make_filter(from_="a", archive=True), make_filter(from_="b", delete=True)]

        fd = diff_filters(observed, desired)

        assert fd.added == [make_filter(from_="b", delete=True)]
        assert fd.removed == []

    def test_duplicates_collapse(self):
        observed = [
            make_filter(id="1", from_="a", archive=True),
            make_filter(id="2", from_="a", archive=True),
        ]
        desired = [make_filter(from_="a", archive=True)]

        assert diff_filters(observed, desired).empty

    def test_duplicates_added_once(self):
        desired = [make_filter(from_="a", mark_read=True), make_filter(from_="a", mark_read=True)]

        fd = diff_filters([], desired)

        assert fd.added == desired[:1]

    def test_add_and_remove(self):
        observed = some_filters()
        desired = [
            make_filter(
                from_="{someone@gmail.com else@gmail.com}",
                mark_read=True,
                category=Category.PERSONAL,
            ),
            make_filter(query="-{foobar baz}", mark_important=True),
            make_filter(from_="someone@gmail.com", add_label="label1"),
        ]

        fd = diff_filters(observed, desired)

        assert fd.added == [desired[0]]
        assert fd.removed == [observed[1]]

    def test_reordered_filters_have_no_diff(self):
        observed = some_filters()
        desired = [
            make_filter(to="me@gmail.com", mark_read=True, add_label="label2"),
            make_filter(query="-{foobar baz}", mark_important=True),
            make_filter(from_="someone@gmail.com", add_label="label1"),
        ]

        assert diff_filters(observed, desired).empty

    def test_modify(self):
        observed = some_filters()
        desired = [
            make_filter(from_="someone@gmail.com", add_label="label1"),
            make_filter(to="{me@gmail.com you@gmail.com}", mark_read=True, add_label="label2"),
            make_filter(query="-{foobar baz}", mark_important=True),
        ]

        fd = diff_filters(observed, desired)

        assert fd.added == [desired[1]]
        assert fd.removed == [observed[1]]

    def test_remove(self):
        observed = some_filters()
        desired = [make_filter(to="me@gmail.com", mark_read=True, add_label="label2")]

        fd = diff_filters(observed, desired)

        assert fd.added == []
        assert sorted(f.id for f in fd.removed) == ["abcdefg", "zxcvb"]

    @pytest.mark.parametrize("seed", range(5))
    def test_input_order_does_not_matter(self, seed):
        rng = random.Random(seed)
        observed = some_filters()
        desired = [
            make_filter(from_="someone@gmail.com", add_label="label1"),
            make_filter(to="you@gmail.com", star=True),
            make_filter(subject="hello", archive=True),
        ]
        expected = changed_filters(observed, desired)

        rng.shuffle(observed)
        rng.shuffle(desired)

        assert changed_filters(observed, desired) == expected


# =============================================================================
# Reordering
# =============================================================================


class TestReorder:
    def test_cost_matrix(self):
        fs = [make_filter(from_="a", archive=True), make_filter(to="b", star=True)]

        costs = cost_matrix(fs, fs)

        assert costs.shape == (2, 2)
        assert np.allclose(np.diag(costs), 0.0)
        assert costs[0, 1] > 0.0
        assert costs[0, 1] == pytest.approx(costs[1, 0])

    def test_cost_matrix_rows_are_the_first_sequence(self):
        added = [
            make_filter(from_="a", archive=True),
            make_filter(from_="a", to="b", subject="c", archive=True, star=True),
        ]
        removed = [
            make_filter(to="b", star=True),
            make_filter(subject="c", query="list:l", mark_read=True),
            make_filter(from_="a", delete=True),
        ]

        costs = cost_matrix(added, removed)

        assert costs.shape == (2, 3)
        for i, a in enumerate(added):
            for j, b in enumerate(removed):
                matcher = difflib.SequenceMatcher(
                    None,
                    a.render().splitlines(keepends=True),
                    b.render().splitlines(keepends=True),
                    autojunk=False,
                )
                assert costs[i, j] == pytest.approx(1.0 - matcher.ratio())

    def test_similar_filters_are_paired(self):
        observed = [
            make_filter(from_="alice@x.com", add_label="friends"),
            make_filter(subject="invoice", add_label="bills"),
        ]
        desired = [
            make_filter(subject="invoices", add_label="bills"),
            make_filter(from_="{alice@x.com bob@x.com}", add_label="friends"),
        ]

        fd = diff_filters(observed, desired)

        assert len(fd.added) == len(fd.removed) == 2
        for removed, added in zip(fd.removed, fd.added):
            assert removed.action.add_label == added.action.add_label

    def test_unmatched_filters_go_last(self):
        f1 = [make_filter(from_="a"), make_filter(from_="b"), make_filter(from_="c")]
        f2 = [make_filter(to="x"), make_filter(to="y")]

        res1, res2 = reorder_with_mapping(f1, f2, [1, -1, 0])

        assert res1 == [f1[0], f1[2], f1[1]]
        assert res2 == [f2[1], f2[0]]

    def test_more_added_than_removed(self):
        observed = [make_filter(from_="alice@x.com", archive=True)]
        desired = [
            make_filter(subject="unrelated", star=True),
            make_filter(from_="{alice@x.com bob@x.com}", archive=True),
            make_filter(to="someone@y.com", delete=True),
        ]

        fd = diff_filters(observed, desired)

        assert len(fd.added) == 3
        assert fd.added[0] == desired[1]
        assert fd.removed == observed


# =============================================================================
# Text output
# =============================================================================

OBSERVED = [
    make_filter(
        id="abcdefg",
        from_="someone@gmail.com",
        query="(a b) subject:(foo bar)",
        mark_read=True,
        category=Category.PERSONAL,
    )
]
DESIRED = [
    make_filter(
        from_="{someone@gmail.com else@gmail.com}",
        query="(a c) subject:(foo baz)",
        mark_read=True,
        category=Category.PERSONAL,
    )
]


def diff_lines(text: str) -> list[str]:
    # The empty query parameter line ends with a space.
    return [line.rstrip() for line in text.strip().splitlines()]


class TestDiffOutput:
    def test_output(self):
        fd = diff_filters(OBSERVED, DESIRED, context_lines=5)

        expected = """
--- Current
+++ TO BE APPLIED
@@ -1,14 +1,14 @@
 * Criteria:
-    from: someone@gmail.com
+    from: {someone@gmail.com else@gmail.com}
     query:
       (
         a
-        b
+        c
       )
       subject:(
         foo
-        bar
+        baz
       )
   Actions:
     mark as read
     categorize as: personal"""
        assert diff_lines(str(fd)) == diff_lines(expected)

    def test_custom_context_lines(self):
        fd = diff_filters(OBSERVED, DESIRED, context_lines=1)

        expected = """
--- Current
+++ TO BE APPLIED
@@ -1,3 +1,3 @@
 * Criteria:
-    from: someone@gmail.com
+    from: {someone@gmail.com else@gmail.com}
     query:
@@ -5,3 +5,3 @@
         a
-        b
+        c
       )
@@ -9,3 +9,3 @@
         foo
-        bar
+        baz
       )"""
        assert diff_lines(str(fd)) == diff_lines(expected)

    def test_debug_info(self):
        fd = diff_filters(OBSERVED, DESIRED, debug_info=True, context_lines=5)

        text = str(fd)

        assert "-# Search: from:someone@gmail.com (a b) subject:(foo bar)\n" in text
        assert (
            "+# URL: https://mail.google.com/mail/u/0/#search/"
            "from%3A%7Bsomeone%40gmail.com+else%40gmail.com%7D+%28a+c%29"
            "+subject%3A%28foo+baz%29\n" in text
        )

    def test_empty_diff_renders_nothing(self):
        assert str(FiltersDiff()) == ""
        assert FiltersDiff().empty
