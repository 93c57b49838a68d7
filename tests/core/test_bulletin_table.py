"""Unit tests for PHIVOLCS bulletin table scraping.

Pure function tests - the HTML is inline, no network access.
"""

from src.core.bulletin_table import parse_bulletin_table


BULLETIN_PAGE = """
<html>
<body>
<table class="MsoNormalTable"><tr><td>Latest Seismic Activity</td></tr></table>
<table class="MsoNormalTable" border="1">
  <tr>
    <th>Date - Time<br>(Philippine Time)</th>
    <th>Latitude (ºN)</th>
    <th>Longitude (ºE)</th>
    <th>Depth (km)</th>
    <th>Mag</th>
    <th>Location</th>
  </tr>
  <tr>
    <td><span><a href="2026_Earthquake_Information\\October\\2026_1018_0315_B1.html">18 October 2026 - 11:15 AM</a></span></td>
    <td>09.12</td>
    <td>126.20</td>
    <td>024</td>
    <td>5.1</td>
    <td>
      031 km S 62° E of Hinatuan
      (Surigao Del Sur)
    </td>
  </tr>
  <tr>
    <td><a href="2026_Earthquake_Information\\October\\2026_1018_0200_B1.html">18 October 2026 - 10:00 AM</a></td>
    <td>14.19</td>
    <td>120.99</td>
    <td>012</td>
    <td>4.2</td>
    <td>012 km N 45° E of Tagaytay City (Cavite)</td>
  </tr>
  <tr><td colspan="6">Advisory row</td></tr>
</table>
</body>
</html>
"""


class TestParseBulletinTable:
    """Tests for parse_bulletin_table()."""

    def test_extracts_data_rows(self):
        rows = parse_bulletin_table(BULLETIN_PAGE)

        assert rows is not None
        assert len(rows) == 2

    def test_row_fields(self):
        rows = parse_bulletin_table(BULLETIN_PAGE)
        row = rows[0]

        assert row.date_time == "18 October 2026 - 11:15 AM"
        assert row.latitude == "09.12"
        assert row.longitude == "126.20"
        assert row.depth == "024"
        assert row.magnitude == "5.1"
        assert row.place == "031 km S 62° E of Hinatuan (Surigao Del Sur)"

    def test_takes_link_from_date_cell(self):
        rows = parse_bulletin_table(BULLETIN_PAGE)

        assert rows[1].bulletin_href == "2026_Earthquake_Information\\October\\2026_1018_0200_B1.html"

    def test_keeps_page_order(self):
        rows = parse_bulletin_table(BULLETIN_PAGE)

        assert [r.magnitude for r in rows] == ["5.1", "4.2"]

    def test_returns_none_without_bulletin_table(self):
        html = '<table class="MsoNormalTable"><tr><td>Nothing here</td></tr></table>'
        assert parse_bulletin_table(html) is None

    def test_ignores_tables_without_bulletin_class(self):
        html = """
        <table class="other">
          <tr><th>Date - Time</th></tr>
          <tr><td>a</td><td>b</td><td>c</td><td>d</td><td>e</td><td>f</td></tr>
        </table>
        """
        assert parse_bulletin_table(html) is None

    def test_row_without_link_has_empty_href(self):
        html = """
        <table class="MsoNormalTable">
          <tr><th>Date - Time</th></tr>
          <tr>
            <td>18 October 2026 - 10:00 AM</td><td>14.19</td><td>120.99</td>
            <td>012</td><td>4.2</td><td>Somewhere</td>
          </tr>
        </table>
        """
        rows = parse_bulletin_table(html)

        assert rows is not None
        assert rows[0].bulletin_href == ""

    def test_empty_page(self):
        assert parse_bulletin_table("") is None

    def test_cells_after_nested_table_are_kept(self):
        html = """
        <table class="MsoNormalTable">
          <tr><th>Date - Time</th></tr>
          <tr>
            <td><a href="b1.html">18 October 2026 - 10:00 AM</a><table><tr><td>icon</td></tr></table></td>
            <td>14.19</td><td>120.99</td><td>012</td><td>4.2</td><td>Somewhere</td>
          </tr>
        </table>
        """
        rows = parse_bulletin_table(html)

        assert rows is not None
        assert len(rows) == 1
        assert rows[0].date_time == "18 October 2026 - 10:00 AM"
        assert rows[0].bulletin_href == "b1.html"
        assert rows[0].magnitude == "4.2"
        assert rows[0].place == "Somewhere"
