"""
Generate the PDF receipt attached to approved CRA emails using ReportLab.

The layout is drawn procedurally on a canvas (A4, millimetre coordinates
measured from the top of the page) and returned base64-encoded, ready to be
used as an email attachment.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from datetime import date

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from .formatting import short_day_label

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
PAGE_BREAK_AT = 270  # mm from the top
FOOTER_HEIGHT = 30  # mm from the bottom


@dataclass
class DayLine:
    date: date
    state: str
    comment: str | None = None


@dataclass
class CraPdfData:
    month: str  # already formatted, e.g. "mars 2024"
    client_name: str
    company_name: str
    user_name: str
    worked_days: float
    absent_days: float
    validated_at: str
    monthly_comment: str | None = None
    day_details: list[DayLine] = field(default_factory=list)
    validator_name: str | None = None


def _y(top_mm: float) -> float:
    """Convert a distance from the top of the page (mm) to canvas coordinates."""
    return PAGE_HEIGHT - top_mm * mm


def _format_days(value: float) -> str:
    return f"{value:g}"


def _state_label(state: str) -> str:
    return "Travaillé" if state == "worked" else "Absent"


def _draw_label_value(pdf: canvas.Canvas, label: str, value: str, top: float) -> None:
    pdf.setFont("Helvetica-Bold", 10)
    pdf.drawString(MARGIN, _y(top), label)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(50 * mm, _y(top), value)


def _draw_footer(pdf: canvas.Canvas, data: CraPdfData) -> None:
    footer_top = PAGE_HEIGHT / mm - FOOTER_HEIGHT
    pdf.setStrokeColorRGB(200 / 255, 200 / 255, 200 / 255)
    pdf.line(MARGIN, _y(footer_top), PAGE_WIDTH - MARGIN, _y(footer_top))

    if data.validator_name:
        validation_line = f"Document validé par {data.validator_name} le {data.validated_at}"
    else:
        validation_line = f"Document validé le {data.validated_at}"

    pdf.setFont("Helvetica-Oblique", 9)
    pdf.drawCentredString(PAGE_WIDTH / 2, _y(footer_top + 8), validation_line)
    pdf.setFont("Helvetica-Oblique", 8)
    pdf.drawCentredString(
        PAGE_WIDTH / 2,
        _y(footer_top + 13),
        f"Ce document a été généré automatiquement par {data.company_name}",
    )


def render_cra_pdf(data: CraPdfData) -> bytes:
    """Draw the CRA receipt and return the raw PDF bytes."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"CRA {data.user_name} {data.month}")
    content_width = PAGE_WIDTH - 2 * MARGIN
    top = 20.0

    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawCentredString(PAGE_WIDTH / 2, _y(top), "Compte-Rendu d'Activité")

    top += 10
    pdf.setFont("Helvetica", 14)
    pdf.drawCentredString(PAGE_WIDTH / 2, _y(top), data.month[:1].upper() + data.month[1:])

    top += 15
    _draw_label_value(pdf, "Société :", data.company_name, top)
    top += 7
    _draw_label_value(pdf, "Client :", data.client_name, top)
    top += 7
    _draw_label_value(pdf, "Consultant :", data.user_name, top)

    # Summary box
    top += 15
    pdf.setStrokeColorRGB(100 / 255, 100 / 255, 100 / 255)
    pdf.setFillColorRGB(245 / 255, 245 / 255, 245 / 255)
    pdf.roundRect(MARGIN, _y(top + 25), content_width, 25 * mm, 3 * mm, stroke=1, fill=1)
    pdf.setFillColorRGB(0, 0, 0)

    top += 10
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(30 * mm, _y(top), f"Jours travaillés : {_format_days(data.worked_days)}")
    pdf.drawString(PAGE_WIDTH / 2 + 10 * mm, _y(top), f"Jours d'absence : {_format_days(data.absent_days)}")
    top += 8
    pdf.setFont("Helvetica", 11)
    pdf.drawString(30 * mm, _y(top), f"Total : {_format_days(data.worked_days + data.absent_days)} jours")

    if data.monthly_comment:
        top += 20
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(MARGIN, _y(top), "Commentaire mensuel :")
        top += 6
        pdf.setFont("Helvetica", 10)
        for line in simpleSplit(data.monthly_comment, "Helvetica", 10, content_width):
            pdf.drawString(MARGIN, _y(top), line)
            top += 5

    if data.day_details:
        top += 15
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawString(MARGIN, _y(top), "Détail des jours :")

        top += 8
        pdf.setFillColorRGB(230 / 255, 230 / 255, 230 / 255)
        pdf.rect(MARGIN, _y(top + 4), content_width, 8 * mm, stroke=0, fill=1)
        pdf.setFillColorRGB(0, 0, 0)
        pdf.setFont("Helvetica-Bold", 9)
        pdf.drawString(25 * mm, _y(top), "Date")
        pdf.drawString(70 * mm, _y(top), "Statut")
        pdf.drawString(100 * mm, _y(top), "Commentaire")
        top += 8

        pdf.setFont("Helvetica", 9)
        for day in data.day_details:
            if top > PAGE_BREAK_AT:
                pdf.showPage()
                pdf.setFont("Helvetica", 9)
                top = 20
            pdf.drawString(25 * mm, _y(top), short_day_label(day.date))
            pdf.drawString(70 * mm, _y(top), _state_label(day.state))
            if day.comment:
                lines = simpleSplit(day.comment, "Helvetica", 9, 85 * mm)
                for offset, line in enumerate(lines):
                    pdf.drawString(100 * mm, _y(top + offset * 4), line)
                top += max(6, len(lines) * 4)
            else:
                top += 6

    _draw_footer(pdf, data)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def generate_cra_pdf(data: CraPdfData) -> str:
    """Render the receipt and return it base64-encoded."""
    return base64.b64encode(render_cra_pdf(data)).decode("ascii")


def cra_pdf_filename(user_name: str, month: str) -> str:
    return f"CRA_{'_'.join(user_name.split())}_{month}.pdf"
