from __future__ import annotations

from typing import Iterable

from .model import RecapRow
from .profiles import ReportProfile


def project_rows(rows: Iterable[RecapRow], profile: ReportProfile) -> list[dict]:
    """Flat export rows in the profile's column order.

    ``No`` is numbered over the rows given, i.e. after filtering/grouping.
    """

    out: list[dict] = []
    for no, row in enumerate(rows, start=1):
        record = {"No": no}
        for column in profile.columns:
            record[column.header] = column.getter(row)
        out.append(record)
    return out
