from schemas.remediation_models import RemediationOutcome
from services.status_annotator import annotate_status

URL = "https://acct.blob.core.windows.net/cont/a.txt"


def test_appends_trailing_status_column() -> None:
    table = [["name", "url"], ["a", URL], ["b", "no reference"]]

    index = annotate_status(table, {1: RemediationOutcome.changed("Archive", "Cool")})

    assert index == 2
    assert table == [
        ["name", "url", "Status"],
        ["a", URL, "Changed: Archive → Cool"],
        ["b", "no reference"],
    ]


def test_column_goes_after_widest_row() -> None:
    table = [["url"], [URL, "extra", "more"], [URL]]

    index = annotate_status(table, {
        1: RemediationOutcome.skipped("already Hot"),
        2: RemediationOutcome.error("not accessible"),
    })

    assert index == 3
    assert table[0] == ["url", "", "", "Status"]
    assert table[1] == [URL, "extra", "more", "Skipped: already Hot"]
    assert table[2] == [URL, "", "", "Error: not accessible"]


def test_running_twice_appends_a_second_status_column() -> None:
    table = [["url"], [URL]]
    outcomes = {1: RemediationOutcome.skipped("already Cool")}

    annotate_status(table, outcomes)
    annotate_status(table, outcomes)

    assert table == [
        ["url", "Status", "Status"],
        [URL, "Skipped: already Cool", "Skipped: already Cool"],
    ]


def test_header_row_outcomes_are_ignored() -> None:
    table = [["url"], [URL]]
    annotate_status(table, {0: RemediationOutcome.error("x"), 5: RemediationOutcome.error("y")})
    assert table == [["url", "Status"], [URL]]
