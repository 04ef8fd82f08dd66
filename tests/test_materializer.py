"""Tests for variant materialization."""

from __future__ import annotations

import pytest

from templar.exceptions import ReservedVersionError, UnknownVersionError
from templar.materializer import (
    lines_to_delete,
    materialize_variant,
    materialize_variants,
    resolve_targets,
)
from templar.scanner import scan_blocks
from templar.schemas import MembershipTable
from templar.version_table import build_membership_table

CHUNK_A = "set.seed(123)"
CHUNK_B = "set.seed(456)"
CHUNK_SHARED = "a <- rnorm(10)"
TEXT_A = "You are taking **Exam A**"
TEXT_B = "You are taking **Exam B**"
TEXT_SOLUTION = "The mean is `r mean(a)`"


def _table(lines: list[str]) -> MembershipTable:
    return build_membership_table(*scan_blocks(lines))


def _by_name(lines: list[str], **kwargs) -> dict[str, list[str]]:
    variants = materialize_variants(lines, _table(lines), **kwargs)
    return {variant.name: variant.lines for variant in variants}


def _contains_run(haystack: list[str], run: list[str]) -> bool:
    return any(haystack[i : i + len(run)] == run for i in range(len(haystack) - len(run) + 1))


def _is_subsequence(needle: list[str], haystack: list[str]) -> bool:
    remaining = iter(haystack)
    return all(any(line == candidate for candidate in remaining) for line in needle)


class TestResolveTargets:
    """Tests for resolve_targets function."""

    def test_default_with_solutions(self, exam_lines: list[str]) -> None:
        """By default each base version gets a merged solution variant."""
        plans = resolve_targets(_table(exam_lines))

        assert [plan.name for plan in plans] == ["A-solution", "B-solution"]

    def test_default_without_solutions(self, exam_lines: list[str]) -> None:
        """Without pulling, every discovered version is a target."""
        plans = resolve_targets(_table(exam_lines), pull_solutions=False)

        assert [plan.name for plan in plans] == ["A", "B", "solution"]

    def test_solution_keep_is_or_of_columns(self, exam_lines: list[str]) -> None:
        """A solution variant keeps rows kept by its base or by "solution"."""
        table = _table(exam_lines)

        (plan_a, _) = resolve_targets(table)

        expected = [a or s for a, s in zip(table.column("A"), table.column("solution"))]
        assert plan_a.keep == expected

    def test_explicit_subset_keeps_request_order(self, exam_lines: list[str]) -> None:
        """Requested names keep their order and duplicates collapse."""
        plans = resolve_targets(_table(exam_lines), ["B", "A", "B"], pull_solutions=False)

        assert [plan.name for plan in plans] == ["B", "A"]

    def test_explicit_solution_dropped_when_pulling(self, exam_lines: list[str]) -> None:
        """A listed "solution" is not built on its own when pulling."""
        plans = resolve_targets(_table(exam_lines), ["A", "solution"])

        assert [plan.name for plan in plans] == ["A-solution"]

    def test_unknown_version_raises(self, exam_lines: list[str]) -> None:
        """A requested name missing from the source is rejected."""
        with pytest.raises(UnknownVersionError, match="C"):
            resolve_targets(_table(exam_lines), ["A", "C"])

    def test_unknown_version_is_value_error(self, exam_lines: list[str]) -> None:
        """UnknownVersionError can be caught as ValueError."""
        with pytest.raises(ValueError):
            resolve_targets(_table(exam_lines), ["missing"])

    def test_none_never_a_default_target(self) -> None:
        """The reserved "none" version is never built by default."""
        lines = ['```{r, version = "none"}', "notes", "```", '```{r, version = "A"}', "x", "```"]

        plans = resolve_targets(_table(lines), pull_solutions=False)

        assert [plan.name for plan in plans] == ["A"]

    def test_requesting_none_raises(self) -> None:
        """Asking for "none" explicitly is an error."""
        lines = ['```{r, version = "none"}', "notes", "```"]

        with pytest.raises(ReservedVersionError):
            resolve_targets(_table(lines), ["none"])

    def test_pulling_without_solution_blocks(self) -> None:
        """Solution variants still come out; they match their base version."""
        lines = ['```{r, version = "A"}', "x", "```", "```{r}", "y", "```"]
        table = _table(lines)

        (plan,) = resolve_targets(table)

        assert plan.name == "A-solution"
        assert plan.keep == table.column("A")


class TestLinesToDelete:
    """Tests for lines_to_delete function."""

    def test_exam_variant_a(self, exam_lines: list[str]) -> None:
        """Excluded blocks and all decoration lines are deleted for A."""
        table = _table(exam_lines)

        doomed = lines_to_delete(table, table.column("A"))

        excluded_blocks = set(range(17, 22)) | set(range(31, 34)) | set(range(39, 44))
        decorations = {11, 12, 15, 17, 18, 21, 39, 40, 43}
        assert doomed == excluded_blocks | decorations

    def test_untagged_section_keeps_first_content_line(self) -> None:
        """Only the sigils of an untagged section are removed."""
        lines = ["intro", "%%%", "first", "second", "%%%"]
        table = _table(lines)

        assert lines_to_delete(table, table.column("anything")) == {2, 5}


class TestMaterializeVariants:
    """End-to-end behavior of the materializer on the exam document."""

    def test_solution_example(self, exam_lines: list[str]) -> None:
        """pull_solutions=True: A-solution and B-solution only."""
        outputs = _by_name(exam_lines)

        assert set(outputs) == {"A-solution", "B-solution"}
        a_sol = outputs["A-solution"]
        assert CHUNK_A in a_sol
        assert CHUNK_SHARED in a_sol
        assert TEXT_A in a_sol
        assert TEXT_SOLUTION in a_sol
        assert CHUNK_B not in a_sol
        assert TEXT_B not in a_sol
        b_sol = outputs["B-solution"]
        assert CHUNK_B in b_sol
        assert TEXT_SOLUTION in b_sol
        assert CHUNK_A not in b_sol
        assert TEXT_A not in b_sol

    def test_plain_example(self, exam_lines: list[str]) -> None:
        """pull_solutions=False, to_knit=A,B: solution section is left out."""
        outputs = _by_name(exam_lines, to_knit=["A", "B"], pull_solutions=False)

        assert set(outputs) == {"A", "B"}
        assert CHUNK_A in outputs["A"]
        assert CHUNK_SHARED in outputs["A"]
        assert CHUNK_B not in outputs["A"]
        assert TEXT_SOLUTION not in outputs["A"]
        assert CHUNK_B in outputs["B"]
        assert CHUNK_SHARED in outputs["B"]
        assert CHUNK_A not in outputs["B"]
        assert TEXT_SOLUTION not in outputs["B"]

    def test_exact_output_for_variant_b(self, exam_lines: list[str]) -> None:
        """Variant B matches the expected document line for line."""
        outputs = _by_name(exam_lines, to_knit=["B"], pull_solutions=False)

        assert outputs["B"] == [
            "---",
            'title: "Example"',
            "output: html_document",
            "---",
            "",
            "```{r, include=FALSE}",
            "knitr::opts_chunk$set(echo = TRUE)",
            "templar::versions()",
            "```",
            "",
            "",
            "",
            TEXT_B,
            "",
            "## Question 1: Means",
            "",
            "Find the mean of the vector `a`",
            "",
            "",
            "```{r, version = \"B\"}",
            CHUNK_B,
            "```",
            "",
            "```{r}",
            CHUNK_SHARED,
            "```",
            "",
        ]

    def test_decoration_never_survives(self, exam_lines: list[str]) -> None:
        """No sigil or declaration line reaches any variant."""
        for kwargs in ({}, {"pull_solutions": False}):
            for lines in _by_name(exam_lines, **kwargs).values():
                assert "%%%" not in lines
                assert not any(line.startswith("version:") for line in lines)

    def test_untagged_content_is_verbatim_and_ordered(self, exam_lines: list[str]) -> None:
        """Untagged chunks appear unchanged in every variant."""
        untagged_chunk = exam_lines[34:37]
        setup_chunk = exam_lines[5:9]

        for lines in _by_name(exam_lines, pull_solutions=False).values():
            assert _contains_run(lines, setup_chunk)
            assert _contains_run(lines, untagged_chunk)
            assert lines.index(setup_chunk[0]) < lines.index(untagged_chunk[1])

    def test_order_is_preserved(self, exam_lines: list[str]) -> None:
        """Every variant is a subsequence of the source."""
        for kwargs in ({}, {"pull_solutions": False}):
            for lines in _by_name(exam_lines, **kwargs).values():
                assert _is_subsequence(lines, exam_lines)

    def test_none_blocks_appear_nowhere(self) -> None:
        """Blocks tagged "none" are dropped even alongside other names."""
        lines = [
            '```{r, version = "A"}',
            "a_only",
            "```",
            "%%%",
            "version: none",
            "author note",
            "%%%",
            '```{r, version = c("B", "none")}',
            "b_and_none",
            "```",
            '```{r, version = "solution"}',
            "answer",
            "```",
            "%%%",
            "version: B",
            "b text",
            "%%%",
        ]

        for kwargs in ({}, {"pull_solutions": False}):
            outputs = _by_name(lines, **kwargs)
            assert outputs
            for output in outputs.values():
                assert "author note" not in output
                assert "b_and_none" not in output

        assert "answer" in _by_name(lines)["B-solution"]

    def test_solution_only_block_in_every_solution_variant(self, exam_lines: list[str]) -> None:
        """Solution text is merged into every solution variant."""
        outputs = _by_name(exam_lines)

        assert all(TEXT_SOLUTION in lines for lines in outputs.values())

    def test_multi_version_block(self) -> None:
        """A block tagged with two names goes into both versions."""
        lines = ['```{r, version = c("A", "B")}', "shared", "```", '```{r, version = "C"}', "c", "```"]

        outputs = _by_name(lines, pull_solutions=False)

        assert "shared" in outputs["A"]
        assert "shared" in outputs["B"]
        assert "shared" not in outputs["C"]

    def test_code_inside_excluded_section_is_dropped(self) -> None:
        """Dropping a section removes code blocks nested in it."""
        lines = [
            "%%%",
            "version: B",
            "```{r}",
            "nested",
            "```",
            "%%%",
        ]

        outputs = _by_name(lines + ['```{r, version = "A"}', "a", "```"], pull_solutions=False)

        assert "nested" not in outputs["A"]
        assert outputs["B"] == ["```{r}", "nested", "```"]

    def test_variants_are_independent_of_each_other(self, exam_lines: list[str]) -> None:
        """Build order does not change output or the source lines."""
        original = list(exam_lines)
        table = _table(exam_lines)
        plans = resolve_targets(table, pull_solutions=False)

        forward = [materialize_variant(exam_lines, table, plan).lines for plan in plans]
        backward = [materialize_variant(exam_lines, table, plan).lines for plan in reversed(plans)]

        assert forward == list(reversed(backward))
        assert exam_lines == original
