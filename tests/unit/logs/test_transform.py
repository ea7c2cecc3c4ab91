"""Tests for tandem.logs._transform module."""

import io

import pytest

from tandem.logs import run_transform, transform_lines, unwrap_line

_PREFIX = "[18-Oct-2026 10:15:02] WARNING: [pool www] child 42 said into "


class TestUnwrapLine:
    def test_unwraps_stderr_message(self) -> None:
        assert unwrap_line(_PREFIX + 'stderr: "PHP Warning: oops"') == "PHP Warning: oops"

    def test_unwraps_stdout_message(self) -> None:
        assert unwrap_line(_PREFIX + 'stdout: "hello"') == "hello"

    def test_keeps_truncation_marker(self) -> None:
        line = _PREFIX + 'stderr: "a very long message that got cut off..."'

        assert unwrap_line(line) == "a very long message that got cut off..."

    def test_keeps_inner_quotes(self) -> None:
        assert unwrap_line(_PREFIX + 'stderr: "said "hi""') == 'said "hi"'

    def test_empty_message(self) -> None:
        assert unwrap_line(_PREFIX + 'stderr: ""') == ""

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "plain application output",
            "[18-Oct-2026 10:15:02] NOTICE: fpm is running, pid 7",
            "[18-Oct-2026 10:15:02] WARNING: [pool www] server reached pm.max_children",
            _PREFIX + "stderr: unquoted",
        ],
    )
    def test_passes_other_lines_through(self, line: str) -> None:
        assert unwrap_line(line) == line


class TestTransformLines:
    def test_normalizes_line_endings(self) -> None:
        lines = ["first\r\n", _PREFIX + 'stderr: "second"\n', "third"]

        assert list(transform_lines(lines)) == ["first\n", "second\n", "third\n"]


class TestRunTransform:
    def test_copies_source_to_sink(self) -> None:
        source = io.StringIO("one\n" + _PREFIX + 'stdout: "two..."\n')
        sink = io.StringIO()

        run_transform(source, sink)

        assert sink.getvalue() == "one\ntwo...\n"
