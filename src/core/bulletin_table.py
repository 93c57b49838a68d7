"""PHIVOLCS bulletin table scraping - Pure functions.

Extracts the raw rows of the latest-earthquakes table from the PHIVOLCS
home page HTML. No I/O: the page is fetched by the shell layer.
"""

import re
from html.parser import HTMLParser

from src.core.earthquake import BulletinRow


# Class of the tables PHIVOLCS renders its bulletins in
TABLE_CLASS = "MsoNormalTable"

# Header text that identifies the earthquake table among the page's tables
TABLE_MARKERS = ("Date - Time", "Philippine Time")

# Date-Time, Latitude, Longitude, Depth, Magnitude, Location
MIN_COLUMNS = 6

_WHITESPACE = re.compile(r"\s+")


class _Cell:
    def __init__(self) -> None:
        self.text_parts: list[str] = []
        self.href: str | None = None

    @property
    def text(self) -> str:
        return _WHITESPACE.sub(" ", "".join(self.text_parts)).strip()


class _Table:
    def __init__(self, classes: list[str]) -> None:
        self.classes = classes
        self.rows: list[list[_Cell]] = []
        self.text_parts: list[str] = []

    @property
    def text(self) -> str:
        return _WHITESPACE.sub(" ", "".join(self.text_parts))


class _TableCollector(HTMLParser):
    """Collects every table on the page with its rows and cells.

    Open tables are kept on a stack; text counts towards every open table
    so a marker in a nested header table still identifies the outer one.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.tables: list[_Table] = []
        self._stack: list[_Table] = []
        # Row and cell of the enclosing table, restored when a nested table closes
        self._saved: list[tuple[list[_Cell] | None, _Cell | None]] = []
        self._row: list[_Cell] | None = None
        self._cell: _Cell | None = None

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attributes = dict(attrs)
        if tag == "table":
            table = _Table((attributes.get("class") or "").split())
            self.tables.append(table)
            self._stack.append(table)
            self._saved.append((self._row, self._cell))
            self._row = None
            self._cell = None
        elif not self._stack:
            return
        elif tag == "tr":
            self._row = []
            self._stack[-1].rows.append(self._row)
        elif tag in ("td", "th") and self._row is not None:
            self._cell = _Cell()
            if tag == "td":
                self._row.append(self._cell)
        elif tag == "a" and self._cell is not None and self._cell.href is None:
            self._cell.href = attributes.get("href")
        elif tag == "br":
            self.handle_data(" ")

    def handle_endtag(self, tag: str) -> None:
        if tag == "table" and self._stack:
            self._stack.pop()
            self._row, self._cell = self._saved.pop()
        elif tag in ("td", "th"):
            self._cell = None
        elif tag == "tr":
            self._row = None

    def handle_data(self, data: str) -> None:
        for table in self._stack:
            table.text_parts.append(data)
        if self._cell is not None:
            self._cell.text_parts.append(data)


def _find_bulletin_table(tables: list[_Table]) -> _Table | None:
    for table in tables:
        if TABLE_CLASS not in table.classes:
            continue
        if any(marker in table.text for marker in TABLE_MARKERS):
            return table
    return None


def parse_bulletin_table(html: str) -> list[BulletinRow] | None:
    """Scrape the PHIVOLCS bulletin table into raw rows.

    Header rows and rows with fewer than six data cells are skipped. The
    bulletin link is taken from the first anchor of the date-time cell.

    Args:
        html: PHIVOLCS home page HTML

    Returns:
        Raw rows in page order (newest first), or None if the table is missing
    """
    collector = _TableCollector()
    collector.feed(html)
    collector.close()

    target = _find_bulletin_table(collector.tables)
    if target is None:
        return None

    rows = []
    for cells in target.rows:
        if len(cells) < MIN_COLUMNS:
            continue
        rows.append(BulletinRow(
            date_time=cells[0].text,
            latitude=cells[1].text,
            longitude=cells[2].text,
            depth=cells[3].text,
            magnitude=cells[4].text,
            place=cells[5].text,
            bulletin_href=cells[0].href or "",
        ))

    return rows
