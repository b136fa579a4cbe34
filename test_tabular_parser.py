"""
Tests for format detection and tabular parsing of capture exports.
"""

import math

from pitchmechanics.utils.diagnostics import CollectingDiagnostics, DiagnosticKind
from pitchmechanics.utils.tabular_parser import (
    TableFormat, detect_format, has_header_row, is_numeric_literal,
    parse_table, split_delimited_line, to_numeric_values
)


def test_detect_format_uses_first_line_only():
    """Comma wins over tab, tab over whitespace; later lines are ignored."""
    assert detect_format("1,2\t3\n4 5 6").separator == ','
    assert detect_format("1\t2\t3\n4,5,6").separator == '\t'

    info = detect_format("1 2 3\n4,5,6")
    assert info.format == TableFormat.WHITESPACE
    assert info.separator is None

    assert detect_format("").format == TableFormat.WHITESPACE


def test_split_delimited_line_handles_quotes():
    assert split_delimited_line('1,"a,b",3') == ['1', 'a,b', '3']
    assert split_delimited_line('"say ""hi""",2') == ['say "hi"', '2']
    assert split_delimited_line(' 1 , 2 ') == ['1', '2']


def test_split_delimited_line_accepts_mixed_separators():
    assert split_delimited_line('1\t2,3') == ['1', '2', '3']
    assert split_delimited_line('"x\ty",2') == ['x\ty', '2']


def test_numeric_literal_matching():
    for cell in ['1', '-1.5', '+.5', '3.', '1e-3', '2.5E+10']:
        assert is_numeric_literal(cell), cell
    for cell in ['abc', 'X1', '1.2.3', 'nan', '', '1e']:
        assert not is_numeric_literal(cell), cell


def test_header_detection():
    assert has_header_row([['Head_X', '1'], ['2', '3']])
    assert not has_header_row([['1', '-2.5e3'], ['2', '3']])
    # Empty trailing cells do not make a header
    assert not has_header_row([['1', '2', '']])
    assert not has_header_row([])


def test_parse_table_removes_header_and_blank_lines():
    content = "x,y,z\r\n1,2,3\r\n\r\n   \n4,5,6\n"
    table = parse_table(content)

    assert table.has_header
    assert table.header == ['x', 'y', 'z']
    assert table.rows == [['1', '2', '3'], ['4', '5', '6']]
    assert table.line_count == 3


def test_parse_table_whitespace_rows():
    table = parse_table("Frame Time\n 0   0.0  1.5\n1\t0.003 -2\n")

    assert table.format_info.format == TableFormat.WHITESPACE
    assert table.rows == [['0', '0.0', '1.5'], ['1', '0.003', '-2']]


def test_parse_table_reports_diagnostics():
    diagnostics = CollectingDiagnostics()
    parse_table("a,b\n1,2\n", diagnostics=diagnostics, source="test")

    assert diagnostics.count(DiagnosticKind.FORMAT_DETECTED) == 1
    header_events = diagnostics.of_kind(DiagnosticKind.HEADER_SKIPPED)
    assert len(header_events) == 1
    assert header_events[0].source == "test"


def test_to_numeric_values_keeps_alignment_of_non_finite_cells():
    values = to_numeric_values(['1', 'abc', 'nan', '2', '', 'inf'])

    assert len(values) == 4
    assert values[0] == 1.0
    assert math.isnan(values[1])
    assert values[2] == 2.0
    assert math.isinf(values[3])


def test_to_dataframe_pads_ragged_rows():
    table = parse_table("1 2 3\n4 5\n")
    frame = table.to_dataframe()

    assert frame.shape == (2, 3)
    assert math.isnan(frame.iloc[1, 2])


def test_empty_payload_yields_no_rows():
    table = parse_table("")
    assert table.rows == []
    assert not table.has_header
    assert table.to_dataframe().empty
