"""
Achievement, NAEP and special-population page extraction.

Fixtures mirror the report-card markup: a section table whose year header sits
under <thead> and whose body rows sit directly under <table>.
"""
import pytest
from bs4 import BeautifulSoup

from reportcard.extraction import (
    RowWidthError,
    YearLabelError,
    extract_achievement,
    extract_batch,
    extract_naep,
    extract_special,
)

ACH_ROW = [
    "All Students",  # 0 category
    "70.1",          # 1 state average (ignored)
    "10", "20", "30", "25", "15",   # 2-6 year 1 (3+4 summed)
    "75",            # 7 ignored
    "11", "21", "31", "26",         # 8-11 year 2
    "77",            # 12 ignored
    "12", "22", "32", "27",         # 13-16 year 3
]


def _page(body: str):
    soup = BeautifulSoup(
        f'<html><body><div class="page-wrapper">{body}</div></body></html>', "lxml"
    )
    return soup.find(class_="page-wrapper")


def _tr(cells, cls=None):
    attr = f' class="{cls}"' if cls else ""
    return f"<tr{attr}>" + "".join(f"<td>{c}</td>" for c in cells) + "</tr>"


def _section_table(years, rows_html):
    head = "<thead><tr><th>Group</th>" + "".join(f"<th>{y}</th>" for y in years) + "</tr></thead>"
    return f'<table class="report-card-section-table">{head}{rows_html}</table>'


class TestAchievement:
    def test_full_row_three_records(self):
        page = _page(
            _section_table(
                ["2015", "2016", "2017"],
                _tr(["Math"], cls="data-section") + _tr(ACH_ROW),
            )
        )
        out = extract_achievement(page)
        assert out == [
            ["Math", "All Students", "2015", "10", "50", "25", "15"],
            ["Math", "All Students", "2016", "11", "21", "31", "26"],
            ["Math", "All Students", "2017", "12", "22", "32", "27"],
        ]

    def test_short_rows_are_padded_not_failed(self):
        page = _page(
            _section_table(
                ["2015", "2016", "2017"],
                _tr(["Math"], cls="data-section") + _tr(["Male", "N/A"]) + _tr(ACH_ROW[:10]),
            )
        )
        out = extract_achievement(page)
        assert len(out) == 6
        assert all(len(r) == 7 for r in out)
        assert out[0] == ["Math", "Male", "2015", "", "", "", ""]
        # cols 8-9 present, 10-11 padded
        assert out[4] == ["Math", "All Students", "2016", "11", "21", "", ""]

    def test_non_numeric_merge_keeps_first_cell(self):
        row = list(ACH_ROW)
        row[4] = "N/A"
        page = _page(_section_table(["2015", "2016", "2017"], _tr(row)))
        out = extract_achievement(page)
        assert out[0][4] == "20"

    def test_metric_switches_between_sections(self):
        page = _page(
            _section_table(
                ["2015", "2016", "2017"],
                _tr(["Math"], cls="data-section")
                + _tr(["A"] + ACH_ROW[1:])
                + _tr(["B"] + ACH_ROW[1:])
                + _tr(["Reading"], cls="data-section")
                + _tr(["C"] + ACH_ROW[1:]),
            )
        )
        metrics = [(r[0], r[1]) for r in extract_achievement(page)]
        assert metrics == [("Math", "A")] * 3 + [("Math", "B")] * 3 + [("Reading", "C")] * 3

    def test_header_rows_are_not_data(self):
        page = _page(_section_table(["2015", "2016", "2017"], ""))
        assert extract_achievement(page) == []

    def test_too_few_years_raises(self):
        page = _page(_section_table(["2016", "2017"], _tr(ACH_ROW)))
        with pytest.raises(YearLabelError):
            extract_achievement(page)

    def test_missing_header_raises_even_without_rows(self):
        page = _page('<table class="report-card-section-table"></table>')
        with pytest.raises(YearLabelError):
            extract_achievement(page)

    def test_short_header_without_data_rows_is_empty(self):
        """Year labels are only needed once a data row is sliced."""
        page = _page(_section_table(["2016", "2017"], _tr(["Math"], cls="data-section")))
        assert extract_achievement(page) == []


class TestNAEP:
    def test_two_year_windows(self):
        row = ["Grade 4 Math", "30", "40", "20", "10", "AR", "31", "39", "21", "9"]
        page = _page(_section_table(["2015", "2017"], _tr(["NAEP Math"], cls="data-section") + _tr(row)))
        assert extract_naep(page) == [
            ["NAEP Math", "Grade 4 Math", "2015", "30", "40", "20", "10"],
            ["NAEP Math", "Grade 4 Math", "2017", "31", "39", "21", "9"],
        ]

    def test_short_row_is_an_error(self):
        page = _page(_section_table(["2015", "2017"], _tr(["Grade 4 Math", "30", "40"])))
        with pytest.raises(RowWidthError):
            extract_naep(page)


def _special_page(rows_html):
    # Four leading <tr>: the year header and three sub-header rows.
    head = (
        "<thead>"
        + _tr(["Group", "2015", "2016", "2017"])
        + _tr(["", "N", "%", "Rate"] * 2)
        + _tr(["Notes"])
        + _tr([""])
        + "</thead>"
    )
    return _page(
        '<div class="special"><table class="report-card-section-table">'
        f"{head}<tbody>{rows_html}</tbody></table></div>"
    )


class TestSpecial:
    CATEGORIES = ["All Students", "Male", "Female", "Economically Disadvantaged", "English Learners"]

    def test_end_to_end_fifteen_records(self):
        rows = "".join(
            _tr([cat] + [f"{i}{j}" for j in range(1, 10)]) for i, cat in enumerate(self.CATEGORIES)
        )
        out = extract_special(_special_page(rows))
        assert len(out) == 15
        assert all(len(r) == 6 for r in out)
        assert out[0] == ["default", "All Students", "2015", "01", "02", "03"]
        assert out[5] == ["default", "Male", "2017", "17", "18", "19"]
        assert [r[2] for r in out[:3]] == ["2015", "2016", "2017"]

    @pytest.mark.parametrize("width", [9, 11])
    def test_rows_not_exactly_ten_wide_are_dropped(self, width):
        rows = _tr(["Male"] + ["1"] * (width - 1)) + _tr(["Female"] + ["2"] * 9)
        out = extract_special(_special_page(rows))
        assert [r[1] for r in out] == ["Female"] * 3

    def test_short_header_with_only_dropped_rows_is_empty(self):
        head = "<thead>" + _tr(["Group", "2016", "2017"]) + _tr(["a"]) + _tr(["b"]) + _tr(["c"]) + "</thead>"
        page = _page(
            '<table class="report-card-section-table">'
            f"{head}<tbody>{_tr(['Male'] + ['1'] * 8)}</tbody></table>"
        )
        assert extract_special(page) == []

    def test_batch_is_tagged_with_variant(self):
        batch = extract_batch(_special_page(_tr(["All Students"] + ["1"] * 9)), "special")
        assert batch.variant == "special"
        assert len(batch.records) == 3
