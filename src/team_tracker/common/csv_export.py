from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping, Sequence

from flask import current_app


def csv_response(rows: Iterable[Mapping[str, object]], *, fieldnames: Sequence[str], filename: str):
    """CSV download, UTF-8 with BOM so spreadsheet apps detect the encoding."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames))
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    return current_app.response_class(
        out.getvalue().encode("utf-8-sig"),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
