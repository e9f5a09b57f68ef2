from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def rows_to_xlsx(rows: Sequence[dict], *, headers: Sequence[str], sheet_name: str) -> io.BytesIO:
    """Write projected rows to an in-memory workbook (one sheet)."""
    df = pd.DataFrame(list(rows), columns=list(headers))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)

    output.seek(0)
    return output
