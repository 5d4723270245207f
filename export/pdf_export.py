"""Simulation summary PDF."""
from __future__ import annotations
from io import BytesIO
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.utils import format_currency, format_date, format_percent
from myhome.calculators import schedule_frame
from myhome.models import Customer, LoanSimulation, Property
from myhome.presets import DISCLAIMER, SUBSIDY_LABELS

GRID = [('BACKGROUND',(0,0),(-1,0), colors.lightgrey),('BOX',(0,0),(-1,-1),1,colors.black),('INNERGRID',(0,0),(-1,-1),0.5,colors.grey)]


def build_simulation_pdf(
    simulation: LoanSimulation,
    customer: Optional[Customer] = None,
    property_: Optional[Property] = None,
    institution_name: str = "",
    title: str = "Simulación de crédito MiVivienda",
) -> bytes:
    """Render ``simulation`` (summary, subsidies and schedule) to PDF bytes.

    A simulation without a payment plan has nothing to report, so it is
    rejected with ``ValueError``.
    """

    plan = simulation.payment_plan
    if plan is None:
        raise ValueError("simulation has no payment plan")
    params = simulation.parameters

    buf = BytesIO()
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36, title=title)
    story = [Paragraph(f"<b>{title}</b>", styles['Title']), Spacer(1,6)]
    story.append(Paragraph(f"Simulación {simulation.id}  |  {format_date(simulation.simulation_date)}  |  {simulation.status.value}", styles['Normal']))
    story += [Spacer(1, 12)]

    who = [["Datos", ""]]
    if customer is not None:
        who += [["Cliente", customer.display_name], ["Email", customer.email or "-"]]
    if property_ is not None:
        who += [["Propiedad", property_.label], ["Precio", format_currency(property_.price_amount, property_.price_currency)]]
    if institution_name:
        who.append(["Entidad financiera", institution_name])
    if len(who) > 1:
        t = Table(who, hAlign='LEFT', colWidths=[180, 340])
        t.setStyle(TableStyle(GRID))
        story += [t, Spacer(1, 12)]

    summary = [["Resumen", ""], ["Cuota mensual", format_currency(plan.monthly_payment.amount)], ["TCEA", format_percent(plan.tcea)], ["TIR", format_percent(plan.tir)], ["VAN", format_currency(plan.van.amount)]]
    if params is not None:
        summary += [
            ["Precio de la propiedad", format_currency(params.property_price.amount)],
            ["Cuota inicial", format_currency(params.initial_down_payment.amount)],
            ["Monto financiado", format_currency(params.loan_amount.amount)],
            ["Plazo", f"{params.term_in_months} meses"],
            ["Tasa", f"{format_percent(params.interest_rate.rate * 100, 4)} {params.interest_rate.type.value}"],
            ["Gracia", f"{params.grace_period.duration_in_months} meses ({params.grace_period.type.value})"],
        ]
    t = Table(summary, hAlign='LEFT', colWidths=[180, 340])
    t.setStyle(TableStyle(GRID))
    story += [t, Spacer(1, 12)]

    if simulation.subsidies:
        rows = [["Bono", "Monto"]] + [[SUBSIDY_LABELS.get(s.name, s.name), format_currency(s.amount.amount)] for s in simulation.subsidies]
        t = Table(rows, hAlign='LEFT', colWidths=[340, 180])
        t.setStyle(TableStyle(GRID))
        story += [Paragraph("<b>Bonos aplicados</b>", styles['Heading3']), Spacer(1,6), t, Spacer(1,12)]

    df = schedule_frame(plan)
    if not df.empty:
        rows = [list(df.columns)]
        for rec in df.itertuples(index=False):
            rows.append([str(rec[0]), format_date(rec[1])] + [f"{v:,.2f}" for v in rec[2:]])
        t = Table(rows, hAlign='LEFT', repeatRows=1)
        t.setStyle(TableStyle(GRID + [('FONTSIZE',(0,0),(-1,-1),7),('ALIGN',(2,1),(-1,-1),'RIGHT')]))
        story += [Paragraph("<b>Cronograma de pagos</b>", styles['Heading3']), Spacer(1,6), t, Spacer(1,12)]

    story += [Spacer(1, 12), Paragraph(f"<font size=8>{DISCLAIMER}</font>", styles['Normal'])]
    doc.build(story)
    return buf.getvalue()
