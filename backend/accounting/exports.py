# accounting/exports.py
"""CSV download helpers."""

import csv

from django.http import HttpResponse


def csv_response(filename: str, rows) -> HttpResponse:
    """Write ``rows`` (header first) as a CSV attachment."""
    response = HttpResponse(content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    writer = csv.writer(response)
    for row in rows:
        writer.writerow(row)
    return response
