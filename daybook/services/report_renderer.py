"""Revenue report rendering: interactive view, snapshot image and exports."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from decimal import Decimal

from openpyxl import Workbook
from openpyxl.styles import Font
from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from daybook.services.calendar_grid import month_label, shift_month
from daybook.services.rates import ZERO, q2
from daybook.services.revenue_aggregator import MonthlyBreakdown

CHART_PALETTE = ("#4f46e5", "#7c3aed", "#10b981", "#f59e0b", "#ef4444", "#3b82f6")
EMPTY_MONTH_MESSAGE = "No work days found for this month."
EXPORT_BLOCKED_MESSAGE = "No data to export for the selected month."

SNAPSHOT_WIDTH = 800
SNAPSHOT_PADDING = 40
SNAPSHOT_SCALE = 2
PAGE_MARGIN_MM = 10

TABLE_HEADERS = ("Client", "Days", "Gross revenue", "Net revenue")
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")
EXPORT_FORMATS = {
    "pdf": "application/pdf",
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


class EmptyReportError(Exception):
    """Raised when an export is requested for a month without work days."""


@dataclass(slots=True)
class ExportFilePayload:
    media_type: str
    filename: str
    content: bytes


@dataclass(slots=True, frozen=True)
class ImagePlacement:
    x: float
    y: float
    width: float
    height: float


def format_money(value: Decimal, currency_code: str) -> str:
    return f"{q2(value):,.2f} {currency_code}"


def _share_percent(part: Decimal, total: Decimal) -> Decimal:
    if total == ZERO:
        return ZERO
    return q2(part * Decimal("100") / total)


def build_revenue_view(
    breakdown: MonthlyBreakdown,
    *,
    year: int,
    month: int,
    currency_code: str,
) -> dict[str, object]:
    """Serializable revenue screen: totals, table rows and chart slices."""

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)

    rows = [
        {
            "client_name": row.client_name,
            "days": row.days,
            "gross_revenue": str(q2(row.gross_revenue)),
            "net_revenue": str(q2(row.net_revenue)),
            "gross_revenue_display": format_money(row.gross_revenue, currency_code),
            "net_revenue_display": format_money(row.net_revenue, currency_code),
        }
        for row in breakdown.rows
    ]
    chart = [
        {
            "client_name": row.client_name,
            "gross_revenue": str(q2(row.gross_revenue)),
            "share_percent": str(_share_percent(row.gross_revenue, breakdown.total_gross)),
            "color": CHART_PALETTE[index % len(CHART_PALETTE)],
        }
        for index, row in enumerate(breakdown.rows)
    ]

    return {
        "year": year,
        "month": month,
        "label": month_label(year, month),
        "currency": currency_code,
        "totals": {
            "days": breakdown.total_days,
            "gross_revenue": str(q2(breakdown.total_gross)),
            "net_revenue": str(q2(breakdown.total_net)),
            "gross_revenue_display": format_money(breakdown.total_gross, currency_code),
            "net_revenue_display": format_money(breakdown.total_net, currency_code),
        },
        "rows": rows,
        "chart": chart,
        "orphaned_days": breakdown.orphaned_days,
        "can_export": not breakdown.is_empty,
        "empty_message": EMPTY_MONTH_MESSAGE if breakdown.is_empty else None,
        "previous": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    }


# ---------- Snapshot ----------
def _font(size: int, font_path: str | None) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    if font_path:
        return ImageFont.truetype(font_path, size * SNAPSHOT_SCALE)
    return ImageFont.load_default(size=size * SNAPSHOT_SCALE)


def render_snapshot(
    breakdown: MonthlyBreakdown,
    *,
    year: int,
    month: int,
    currency_code: str,
    font_path: str | None = None,
) -> Image.Image:
    """Draw the printable report off-screen as a white RGB image.

    ``font_path`` selects a TrueType font for scripts the bundled default
    font has no glyphs for.
    """

    s = SNAPSHOT_SCALE
    width = SNAPSHOT_WIDTH * s
    pad = SNAPSHOT_PADDING * s
    row_height = 44 * s
    table_top = 300 * s
    height = table_top + row_height * (len(breakdown.rows) + 1) + pad

    image = Image.new("RGB", (width, height), "#ffffff")
    draw = ImageDraw.Draw(image)
    border = "#e5e7eb"

    title_font = _font(28, font_path)
    subtitle_font = _font(20, font_path)
    label_font = _font(16, font_path)
    value_font = _font(24, font_path)
    cell_font = _font(14, font_path)

    def centered(text: str, top: int, font: ImageFont.ImageFont | ImageFont.FreeTypeFont, fill: str) -> None:
        text_width = draw.textlength(text, font=font)
        draw.text(((width - text_width) / 2, top), text, font=font, fill=fill)

    centered("Revenue report", pad, title_font, "#111827")
    centered(month_label(year, month), pad + 44 * s, subtitle_font, "#374151")

    summary = (
        ("Gross revenue", format_money(breakdown.total_gross, currency_code)),
        ("Net revenue", format_money(breakdown.total_net, currency_code)),
        ("Days worked", str(breakdown.total_days)),
    )
    gap = 20 * s
    box_width = (width - 2 * pad - 2 * gap) // 3
    box_top = pad + 100 * s
    box_bottom = box_top + 100 * s
    for index, (label, value) in enumerate(summary):
        left = pad + index * (box_width + gap)
        draw.rounded_rectangle(
            (left, box_top, left + box_width, box_bottom),
            radius=8 * s,
            fill="#f9fafb",
            outline=border,
            width=s,
        )
        for text, font, fill, top in (
            (label, label_font, "#6b7280", box_top + 16 * s),
            (value, value_font, "#111827", box_top + 48 * s),
        ):
            text_width = draw.textlength(text, font=font)
            draw.text((left + (box_width - text_width) / 2, top), text, font=font, fill=fill)

    draw.text((pad, table_top - 40 * s), "Client breakdown", font=subtitle_font, fill="#1f2937")

    table_width = width - 2 * pad
    column_edges = [pad, pad + int(table_width * 0.4), pad + int(table_width * 0.55), pad + int(table_width * 0.775), width - pad]
    table_rows: list[tuple[str, ...]] = [TABLE_HEADERS]
    table_rows.extend(
        (
            row.client_name,
            str(row.days),
            format_money(row.gross_revenue, currency_code),
            format_money(row.net_revenue, currency_code),
        )
        for row in breakdown.rows
    )

    for row_index, values in enumerate(table_rows):
        top = table_top + row_index * row_height
        if row_index == 0:
            draw.rectangle((pad, top, width - pad, top + row_height), fill="#f9fafb")
        for column, text in enumerate(values):
            left, right = column_edges[column], column_edges[column + 1]
            draw.rectangle((left, top, right, top + row_height), outline=border, width=s)
            text_top = top + (row_height - 14 * s) / 2
            if column == 0:
                draw.text((left + 12 * s, text_top), text, font=cell_font, fill="#111827")
            else:
                text_width = draw.textlength(text, font=cell_font)
                draw.text((right - 12 * s - text_width, text_top), text, font=cell_font, fill="#374151")

    return image


def fit_image_to_page(
    image_width: float,
    image_height: float,
    *,
    page_width: float,
    page_height: float,
    margin: float,
) -> ImagePlacement:
    """Scale an image into the page inside ``margin``, keeping aspect ratio.

    Shrinks to the available width first; when the result is still too tall,
    shrinks to the available height and recomputes the width. The placement
    is centred horizontally and top-aligned at the margin, with ``y`` measured
    from the top edge.
    """

    ratio = image_width / image_height
    width = page_width - 2 * margin
    height = width / ratio
    if height > page_height - 2 * margin:
        height = page_height - 2 * margin
        width = height * ratio
    return ImagePlacement(x=(page_width - width) / 2, y=margin, width=width, height=height)


# ---------- Exports ----------
def export_filename(year: int, month: int, extension: str) -> str:
    return f"revenue-{year:04d}-{month:02d}.{extension}"


def spreadsheet_text(value: str) -> str:
    """Quote text a spreadsheet would otherwise evaluate as a formula."""

    if value.startswith(FORMULA_PREFIXES):
        return f"'{value}"
    return value


def _flatten_rows(breakdown: MonthlyBreakdown) -> list[list[str]]:
    rows = [
        [spreadsheet_text(row.client_name), str(row.days), str(q2(row.gross_revenue)), str(q2(row.net_revenue))]
        for row in breakdown.rows
    ]
    rows.append(["Total", str(breakdown.total_days), str(q2(breakdown.total_gross)), str(q2(breakdown.total_net))])
    return rows


def render_pdf(
    breakdown: MonthlyBreakdown,
    *,
    year: int,
    month: int,
    currency_code: str,
    font_path: str | None = None,
) -> bytes:
    snapshot = render_snapshot(
        breakdown,
        year=year,
        month=month,
        currency_code=currency_code,
        font_path=font_path,
    )
    page_width, page_height = A4
    placement = fit_image_to_page(
        snapshot.width,
        snapshot.height,
        page_width=page_width,
        page_height=page_height,
        margin=PAGE_MARGIN_MM * mm,
    )

    output = io.BytesIO()
    pdf = canvas.Canvas(output, pagesize=A4)
    pdf.setTitle(f"Revenue report {month_label(year, month)}")
    # reportlab measures y from the bottom edge.
    pdf.drawImage(
        ImageReader(snapshot),
        placement.x,
        page_height - placement.y - placement.height,
        width=placement.width,
        height=placement.height,
    )
    pdf.showPage()
    pdf.save()
    return output.getvalue()


def render_export(
    breakdown: MonthlyBreakdown,
    *,
    format_name: str,
    year: int,
    month: int,
    currency_code: str,
    font_path: str | None = None,
) -> ExportFilePayload:
    """Render the month's breakdown into a downloadable file.

    Raises ``EmptyReportError`` when the month has no work days; no empty
    document is ever produced.
    """

    if breakdown.is_empty:
        raise EmptyReportError(EXPORT_BLOCKED_MESSAGE)

    filename = export_filename(year, month, format_name)
    media_type = EXPORT_FORMATS[format_name]

    if format_name == "pdf":
        content = render_pdf(
            breakdown,
            year=year,
            month=month,
            currency_code=currency_code,
            font_path=font_path,
        )
        return ExportFilePayload(media_type=media_type, filename=filename, content=content)

    if format_name == "csv":
        sio = io.StringIO()
        writer = csv.writer(sio)
        writer.writerow([header.lower().replace(" ", "_") for header in TABLE_HEADERS])
        writer.writerows(_flatten_rows(breakdown))
        return ExportFilePayload(media_type=media_type, filename=filename, content=sio.getvalue().encode("utf-8"))

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = f"{year:04d}-{month:02d}"
    sheet.append(list(TABLE_HEADERS))
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for client_name, days, gross, net in _flatten_rows(breakdown):
        sheet.append([client_name, int(days), Decimal(gross), Decimal(net)])
    for column in ("C", "D"):
        for cell in sheet[column][1:]:
            cell.number_format = "#,##0.00"

    output = io.BytesIO()
    workbook.save(output)
    return ExportFilePayload(media_type=media_type, filename=filename, content=output.getvalue())
