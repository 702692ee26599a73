"""CSV export of stored survey responses.

Output is spreadsheet-friendly: UTF-8 with a byte-order mark, `;` as the
delimiter and CRLF line endings. Columns are respondent address, submission
date (DD.MM.YYYY) and one column per survey question in survey order.
"""

from __future__ import annotations

import csv
import io
from typing import Any, Iterable, List

from survey_app.models.response import StoredResponse
from survey_app.models.survey import Survey

BOM = "\ufeff"
DELIMITER = ";"
ANONYMOUS = "Anonymous"


def build_header(survey: Survey) -> List[str]:
    return ["Respondent", "Submitted"] + [f"Question {i}" for i in range(1, len(survey.questions) + 1)]


def _cell(value: Any) -> str:
    if isinstance(value, list):
        return "; ".join("" if v is None else str(v) for v in value)
    if value is None or value is False or value == "":
        return ""
    return str(value)


def build_export_csv(survey: Survey, responses: Iterable[StoredResponse]) -> bytes:
    buf = io.StringIO(newline="")
    writer = csv.writer(buf, delimiter=DELIMITER, lineterminator="\r\n")
    writer.writerow(build_header(survey))
    for r in responses:
        by_question = {a.question_id: a.value for a in r.answers}
        address = r.respondent_info.address if r.respondent_info else None
        row = [address or ANONYMOUS, r.submitted_at.strftime("%d.%m.%Y")]
        row.extend(_cell(by_question.get(q.question_id)) for q in survey.questions)
        writer.writerow(row)
    return (BOM + buf.getvalue()).encode("utf-8")


def export_filename(survey_id: str) -> str:
    return f"survey_{survey_id}_responses.csv"


__all__ = ["build_export_csv", "build_header", "export_filename"]
