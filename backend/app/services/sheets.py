import csv
import io
import re

import httpx

from app.core.config import settings

SHEET_ID_RE = re.compile(r"/d/([a-zA-Z0-9-_]+)")


class InvalidSheetUrlError(ValueError):
    pass


def extract_sheet_id(url: str | None) -> str:
    match = SHEET_ID_RE.search(url or "")
    if not match:
        raise InvalidSheetUrlError("URL inválida")
    return match.group(1)


def first_column_values(csv_text: str) -> list[str]:
    values = []
    for row in csv.reader(io.StringIO(csv_text)):
        if row and row[0].strip():
            values.append(row[0].strip())
    return values


async def fetch_first_column(
    url: str | None, *, transport: httpx.AsyncBaseTransport | None = None
) -> list[str]:
    """Reads column A of a public Google Sheet through its CSV export."""
    sheet_id = extract_sheet_id(url)
    csv_url = f"{settings.GOOGLE_SHEETS_BASE_URL}/{sheet_id}/export"
    async with httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True, transport=transport
    ) as client:
        resp = await client.get(csv_url, params={"format": "csv"})
        resp.raise_for_status()
        return first_column_values(resp.text)
