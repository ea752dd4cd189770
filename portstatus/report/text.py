from __future__ import annotations

from io import StringIO

from ..analysis.ports import PortConnections
from ..models import PortListing, ReportModel


def render_listing(listing: PortListing) -> str:
    return PortConnections.render(listing.ports, listing.header)


def render_text(report: ReportModel, separator: str = "") -> str:
    """Render every section of the report as rank lines, in section order."""
    buf = StringIO()
    for i, listing in enumerate(report.sections):
        if i:
            buf.write(separator)
        buf.write(render_listing(listing))
    return buf.getvalue()
