# python
"""
Input cursor behavioral tests.

Scope
- Consumption: pop/pop_n/peek, optional and unbounded counts, breakers.
- History: used(), snapshots, converted_args() after in-place rewriting.
- Soft cursor: run_at_offset() and offset-relative operations.
- Completion lines: quoting, escaping, pending delimiter, passthrough tokens.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from trellis import (
    UNBOUNDED,
    ExtraArgsError,
    Input,
    list_until,
    list_until_symbol,
    neq,
    parse_args,
    parse_comp_line,
)


def values(cells):
    return [cell.value for cell in cells]


class TestConsumption(TestCase):
    """pop, peek and pop_n semantics."""

    def testPoppingToExhaustionYieldsTheTokens(self):
        tokens = ["alpha", "beta", "gamma", "beta"]
        input = parse_args(tokens)
        popped = []
        while (token := input.pop()) is not None:
            popped.append(token)
        self.assertEqual(popped, tokens)
        self.assertTrue(input.fully_processed())

    def testPeekDoesNotConsume(self):
        input = Input(["a", "b"])
        self.assertEqual(input.peek(), "a")
        self.assertEqual(input.peek_at(1), "b")
        self.assertIsNone(input.peek_at(2))
        self.assertEqual(input.remaining(), ["a", "b"])

    def testPopOnEmptyInputReturnsNone(self):
        input = Input()
        self.assertIsNone(input.pop())
        self.assertIsNone(input.peek())
        self.assertTrue(input.fully_processed())

    def testPopNExact(self):
        input = Input(["a", "b", "c"])
        cells, enough = input.pop_n(2)
        self.assertEqual(values(cells), ["a", "b"])
        self.assertTrue(enough)
        self.assertEqual(input.remaining(), ["c"])

    def testPopNNotEnough(self):
        input = Input(["a", "b"])
        cells, enough = input.pop_n(3)
        self.assertEqual(values(cells), ["a", "b"])
        self.assertFalse(enough)
        self.assertTrue(input.fully_processed())

    def testPopNOptional(self):
        input = Input(["a", "b", "c", "d"])
        cells, enough = input.pop_n(1, 2)
        self.assertEqual(values(cells), ["a", "b", "c"])
        self.assertTrue(enough)
        self.assertEqual(input.remaining(), ["d"])

    def testPopNUnboundedEmptiesTheInput(self):
        input = Input(["a", "b", "c"])
        cells, enough = input.pop_n(1, UNBOUNDED)
        self.assertEqual(values(cells), ["a", "b", "c"])
        self.assertTrue(enough)
        self.assertTrue(input.fully_processed())

    def testPopNZeroOnEmptyInputIsEnough(self):
        cells, enough = Input().pop_n(0, UNBOUNDED)
        self.assertEqual(cells, [])
        self.assertTrue(enough)

    def testPopNStopsAtBreaker(self):
        input = Input(["a", "b", ";", "c"])
        cells, enough = input.pop_n(0, UNBOUNDED, list_until_symbol(";"))
        self.assertEqual(values(cells), ["a", "b"])
        self.assertTrue(enough)
        self.assertEqual(input.remaining(), [";", "c"])

    def testPopNDiscardingBreakerConsumesTheSymbol(self):
        input = Input(["a", ";", "c"])
        cells, _ = input.pop_n(0, UNBOUNDED, list_until(neq(";"), discard=True))
        self.assertEqual(values(cells), ["a"])
        self.assertEqual(input.remaining(), ["c"])

    def testBreakerCanLeaveTooFewTokens(self):
        input = Input(["a", ";", "b"])
        cells, enough = input.pop_n(2, 0, list_until_symbol(";"))
        self.assertEqual(values(cells), ["a"])
        self.assertFalse(enough)

    def testBreakingAppliesToEveryPop(self):
        input = Input(["a", "--flag", "b"])
        with input.breaking(list_until(neq("--flag"))):
            cells, _ = input.pop_n(0, UNBOUNDED)
            self.assertEqual(values(cells), ["a"])
        cells, _ = input.pop_n(0, UNBOUNDED)
        self.assertEqual(values(cells), ["--flag", "b"])

    def testPushFrontIsPoppedFirst(self):
        input = Input(["c"])
        input.push_front("a", "b")
        cells, enough = input.pop_n(2)
        self.assertEqual(values(cells), ["a", "b"])
        self.assertTrue(enough)
        self.assertEqual(input.remaining(), ["c"])

    def testPushFrontAfterConsumption(self):
        input = Input(["a", "b"])
        input.pop()
        input.push_front("z")
        self.assertEqual(input.remaining(), ["z", "b"])
        self.assertEqual(input.used(), ["a"])
        self.assertEqual(input.converted_args(), ["a", "z", "b"])

    def testCheckForExtraArgs(self):
        input = Input(["a", "b"])
        input.pop()
        with self.assertRaises(ExtraArgsError) as context:
            input.check_for_extra_args()
        self.assertEqual(context.exception.remaining, ("b",))
        self.assertEqual(str(context.exception), "Unprocessed extra args: ['b']")
        input.pop()
        input.check_for_extra_args()


class TestHistory(TestCase):
    """used tokens, rewriting and snapshots."""

    def testUsedKeepsInputOrder(self):
        input = Input(["a", "b", "c"])
        input.pop_at(1)
        input.pop()
        self.assertEqual(input.used(), ["a", "b"])
        self.assertEqual(input.remaining(), ["c"])

    def testRewrittenCellsAreConverted(self):
        input = Input(["1", "x"])
        cells, _ = input.pop_n(1)
        cells[0].value = "1.0"
        self.assertEqual(input.converted_args(), ["1.0", "x"])

    def testRewriteAt(self):
        input = Input(["a", "b"])
        input.rewrite_at(1, "B")
        self.assertEqual(input.remaining(), ["a", "B"])
        with self.assertRaises(IndexError):
            input.rewrite_at(2, "C")

    def testSnapshotIsRepeatable(self):
        input = Input(["a", "b", "c"])
        input.pop()
        snapshot = input.snapshot()
        input.pop()
        input.pop()
        self.assertEqual(input.get_snapshot(snapshot), ["b", "c"])
        self.assertEqual(input.get_snapshot(snapshot), ["b", "c"])
        self.assertEqual(input.num_snapshots(), 1)

    def testSnapshotsAreIndependent(self):
        input = Input(["a", "b"])
        first = input.snapshot()
        input.pop()
        second = input.snapshot()
        self.assertNotEqual(first, second)
        self.assertEqual(input.get_snapshot(first), ["a", "b"])
        self.assertEqual(input.get_snapshot(second), ["b"])

    def testPushedTokensJoinTheSnapshot(self):
        input = Input(["x"])
        snapshot = input.snapshot()
        input.push_front("w")
        self.assertEqual(input.get_snapshot(snapshot), ["w", "x"])

    def testSnapshotSeesRewrittenValues(self):
        input = Input(["3"])
        snapshot = input.snapshot()
        cells, _ = input.pop_n(1)
        cells[0].value = "3.0"
        self.assertEqual(input.get_snapshot(snapshot), ["3.0"])


class TestOffset(TestCase):
    """the soft cursor."""

    def testOperationsAreRelativeToTheOffset(self):
        input = Input(["a", "--name", "value", "b"])
        with input.run_at_offset(1):
            self.assertEqual(input.offset, 1)
            self.assertEqual(input.peek(), "--name")
            self.assertEqual(input.num_remaining(), 3)
            self.assertEqual(input.pop(), "--name")
            self.assertEqual(input.remaining(), ["value", "b"])
        self.assertEqual(input.offset, 0)
        self.assertEqual(input.remaining(), ["a", "value", "b"])

    def testOffsetRestoredOnError(self):
        input = Input(["a", "b"])
        with self.assertRaises(RuntimeError):
            with input.run_at_offset(1):
                raise RuntimeError("boom")
        self.assertEqual(input.offset, 0)

    def testFullyProcessedPastTheOffset(self):
        input = Input(["a"])
        with input.run_at_offset(1):
            self.assertTrue(input.fully_processed())
            self.assertIsNone(input.pop())
        self.assertFalse(input.fully_processed())

    def testPushFrontAt(self):
        input = Input(["a", "c"])
        input.push_front_at(1, "b")
        self.assertEqual(input.remaining(), ["a", "b", "c"])


class TestCompletionLine(TestCase):
    """parse_comp_line()."""

    def testCommandOnly(self):
        self.assertEqual(parse_comp_line("cmd").remaining(), [""])

    def testTrailingSpaceAddsAnEmptyWord(self):
        self.assertEqual(parse_comp_line("cmd a ").remaining(), ["a", ""])

    def testPartialWord(self):
        self.assertEqual(parse_comp_line("cmd a b").remaining(), ["a", "b"])

    def testQuotedWordsAreGrouped(self):
        input = parse_comp_line("cmd 'a b' \"c d\" e")
        self.assertEqual(input.remaining(), ["a b", "c d", "e"])
        self.assertIsNone(input.delimiter)

    def testUnterminatedQuoteSetsTheDelimiter(self):
        input = parse_comp_line("cmd \"hello wor")
        self.assertEqual(input.remaining(), ["hello wor"])
        self.assertEqual(input.delimiter, "\"")

    def testEscapedSpace(self):
        self.assertEqual(parse_comp_line("cmd a\\ b c").remaining(), ["a b", "c"])

    def testBackslashBeforeOtherCharactersIsKept(self):
        self.assertEqual(parse_comp_line("cmd a\\b").remaining(), ["a\\b"])

    def testTrailingBackslashIsKept(self):
        self.assertEqual(parse_comp_line("cmd abc\\").remaining(), ["abc\\"])
        self.assertEqual(parse_comp_line("cmd a \\").remaining(), ["a", "\\"])

    def testPassthroughTokensComeFirst(self):
        input = parse_comp_line("cmd x", passthrough=["alias", "sub"])
        self.assertEqual(input.remaining(), ["alias", "sub", "x"])


if __name__ == "__main__":
    unittest.main()
