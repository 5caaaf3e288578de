"""Printable lab report for an order (requisition plus any verified results)."""

import io
import logging
from xml.sax.saxutils import escape

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .models import Order

logger = logging.getLogger(__name__)


class OrderReportPDF:
	"""Render an order, its samples and results to PDF bytes."""

	def __init__(self, order: Order):
		self.order = order
		self.margin = 0.75 * inch
		self.brand_color = colors.HexColor("#1d4ed8")
		self.dark_gray = colors.HexColor("#1e293b")
		self.light_gray = colors.HexColor("#f1f5f9")
		self.abnormal_color = colors.HexColor("#b91c1c")

	def generate(self) -> bytes:
		logger.info('Generating lab report PDF for order %s', self.order.order_id)

		buffer = io.BytesIO()
		doc = SimpleDocTemplate(
			buffer,
			pagesize=letter,
			rightMargin=self.margin,
			leftMargin=self.margin,
			topMargin=self.margin,
			bottomMargin=self.margin,
			title=f"Lab Report - {self.order.order_id}",
		)

		styles = getSampleStyleSheet()
		title_style = ParagraphStyle(
			"ReportTitle",
			parent=styles["Heading1"],
			fontSize=20,
			textColor=self.brand_color,
			spaceAfter=12,
		)
		heading_style = ParagraphStyle(
			"ReportHeading",
			parent=styles["Heading2"],
			fontSize=13,
			textColor=self.dark_gray,
			spaceBefore=14,
			spaceAfter=6,
		)
		body_style = ParagraphStyle(
			"ReportBody",
			parent=styles["Normal"],
			fontSize=10,
			textColor=self.dark_gray,
		)

		story = [Paragraph(f"Laboratory Report {escape(self.order.order_id)}", title_style)]
		story.append(self._header_table(body_style))
		story.append(Spacer(1, 0.2 * inch))

		for sample in self.order.samples.all():
			label = sample.sample_type
			if sample.accession_number:
				label = f"{label} ({sample.accession_number})"
			story.append(Paragraph(f"{escape(label)} - {escape(sample.status)}", heading_style))
			story.append(self._results_table(sample))

		story.append(Spacer(1, 0.3 * inch))
		story.append(Paragraph(f"Generated {timezone.now():%Y-%m-%d %H:%M %Z}", body_style))

		doc.build(story)
		return buffer.getvalue()

	def _header_table(self, style):
		patient = self.order.patient
		rows = [
			["Patient", patient.full_name, "MRN", patient.mrn],
			["Date of birth", str(patient.date_of_birth or "-"), "Gender", patient.gender or "-"],
			["Physician", self.order.physician.display_name, "ICD-10", self.order.icd10_code],
			["Priority", self.order.priority, "Status", self.order.order_status],
		]
		table = Table([[Paragraph(escape(str(cell)), style) for cell in row] for row in rows])
		table.setStyle(TableStyle([
			("BACKGROUND", (0, 0), (0, -1), self.light_gray),
			("BACKGROUND", (2, 0), (2, -1), self.light_gray),
			("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
			("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
		]))
		return table

	def _results_table(self, sample):
		data = [["Test", "Result", "Units", "Reference", "Flag"]]
		abnormal_rows = []
		for index, test in enumerate(sample.tests.all(), start=1):
			data.append([
				f"{test.name} ({test.test_code})",
				test.result_value or "Pending",
				test.result_units,
				test.reference_range,
				" ".join(test.flags or []),
			])
			if test.is_abnormal:
				abnormal_rows.append(index)

		table = Table(data, repeatRows=1)
		commands = [
			("BACKGROUND", (0, 0), (-1, 0), self.brand_color),
			("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
			("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
			("FONTSIZE", (0, 0), (-1, -1), 9),
			("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
		]
		for row in abnormal_rows:
			commands.append(("TEXTCOLOR", (0, row), (-1, row), self.abnormal_color))
		table.setStyle(TableStyle(commands))
		return table
