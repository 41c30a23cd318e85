"""CSV export helpers shared by the member, trainer and subscription exports."""

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from fastapi import Response

from gymdesk.app.utils.date_formatting import date_input, format_date_for_csv


@dataclass(frozen=True)
class CSVColumn:
    key: str
    header: str
    formatter: Optional[Callable[[Any], Any]] = None


def get_nested_value(item: Any, path: str) -> Any:
    """Resolve a dotted path against nested mappings or attributes; missing parts yield None."""
    current = item
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def array_to_csv(rows: Sequence[Any], columns: Sequence[CSVColumn]) -> str:
    if not rows:
        return ""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([column.header for column in columns])
    for row in rows:
        values = []
        for column in columns:
            value = get_nested_value(row, column.key)
            if column.formatter is not None:
                value = column.formatter(value)
            values.append("" if value is None else str(value))
        writer.writerow(values)
    return buffer.getvalue().rstrip("\n")


def format_array_for_csv(values: Optional[Iterable[Any]]) -> str:
    if not values or isinstance(values, (str, Mapping)):
        return ""
    return "; ".join(str(value) for value in values)


def format_object_for_csv(value: Optional[Mapping[str, Any]]) -> str:
    if not value or not isinstance(value, Mapping):
        return ""
    if value.get("name") and value.get("phone") and value.get("relationship"):
        return f"{value['name']} ({value['relationship']}) - {value['phone']}"
    return "; ".join(f"{key}: {item}" for key, item in value.items())


def export_filename(prefix: str, on: Optional[date] = None) -> str:
    return f"{prefix}-export-{date_input(on or date.today())}.csv"


def csv_download_response(content: str, filename: str) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=content, media_type="text/csv; charset=utf-8", headers=headers)


__all__ = [
    "CSVColumn",
    "array_to_csv",
    "csv_download_response",
    "export_filename",
    "format_array_for_csv",
    "format_date_for_csv",
    "format_object_for_csv",
    "get_nested_value",
]
