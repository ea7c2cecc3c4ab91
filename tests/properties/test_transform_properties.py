from hypothesis import given, strategies as st

from tandem.logs import transform_lines, unwrap_line

# Single lines: no line terminators
line_text = st.text(
    alphabet=st.characters(exclude_characters="\r\n", exclude_categories=["Cs"])
)

pool_name = st.from_regex(r"[a-z][a-z0-9_-]{0,15}", fullmatch=True)
child_pid = st.integers(min_value=1, max_value=4_194_304)


@given(line=line_text.filter(lambda s: "said into std" not in s))
def test_lines_without_worker_framing_pass_through(line: str) -> None:
    assert unwrap_line(line) == line


@given(
    message=line_text,
    pool=pool_name,
    pid=child_pid,
    stream=st.sampled_from(["stdout", "stderr"]),
)
def test_framing_is_removed_from_worker_output(
    message: str, pool: str, pid: int, stream: str
) -> None:
    line = (
        f"[18-Oct-2026 10:15:02] WARNING: [pool {pool}] child {pid} "
        f'said into {stream}: "{message}"'
    )

    assert unwrap_line(line) == message


@given(lines=st.lists(line_text, max_size=20))
def test_one_output_line_per_input_line(lines: list[str]) -> None:
    output = list(transform_lines(line + "\n" for line in lines))

    assert len(output) == len(lines)
    assert all(out.endswith("\n") and out.count("\n") == 1 for out in output)
