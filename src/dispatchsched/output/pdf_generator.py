"""PDF generation for printable rosters.

This module creates printable PDF rosters showing:
- One landscape page per Sunday-started week: employees down the side,
  days across the top, each cell holding that day's shift
- A staffing summary page listing every block that is still short
"""

from datetime import date, timedelta
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Union

from dispatchsched.domain.intervals import DateLike, format_hours, parse_date, week_start
from dispatchsched.domain.models import Employee, ShiftAssignment, StaffingRequirement
from dispatchsched.validation.staffing import calculate_staffing_levels

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    10: (0.6, 0.8, 0.6),  # Green
    12: (0.6, 0.7, 0.9),  # Blue
    4: (0.95, 0.8, 0.5),  # Orange
    "supervisor": (0.2, 0.2, 0.5),
    "other": (0.8, 0.8, 0.8),
    "off": (0.97, 0.97, 0.97),
}


def _load_canvas():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class RosterPDFGenerator:
    """Generates printable weekly roster PDFs.

    Example:
        >>> generator = RosterPDFGenerator()
        >>> generator.generate(assignments, employees_map, "roster.pdf", requirements)
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        assignments: list[ShiftAssignment],
        employees_map: dict[str, Employee],
        output_path: Union[str, Path],
        requirements: Optional[list[StaffingRequirement]] = None,
        dates: Optional[Iterable[DateLike]] = None,
        holidays: Iterable[DateLike] = (),
    ) -> None:
        """Generate the roster PDF and save it to a file.

        Args:
            assignments: Shifts to print; cancelled ones are skipped.
            employees_map: Dict mapping employee IDs to Employee objects.
            output_path: Path to save the PDF.
            requirements: Staffing blocks for the summary page (omit to skip it).
            dates: Dates to cover (defaults to the span of the shifts).
            holidays: Dates on which holiday blocks apply.
        """
        canvas, pagesize = _load_canvas()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, assignments, employees_map, requirements, dates, holidays)
        c.save()

    def generate_to_buffer(
        self,
        assignments: list[ShiftAssignment],
        employees_map: dict[str, Employee],
        requirements: Optional[list[StaffingRequirement]] = None,
        dates: Optional[Iterable[DateLike]] = None,
        holidays: Iterable[DateLike] = (),
    ) -> BytesIO:
        """Generate the roster PDF and return it as a bytes buffer."""
        canvas, pagesize = _load_canvas()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, assignments, employees_map, requirements, dates, holidays)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, assignments, employees_map, requirements, dates, holidays) -> None:
        active = [a for a in assignments if not a.is_cancelled]
        if dates is not None:
            days = sorted(parse_date(d) for d in dates)
        else:
            days = sorted({parse_date(a.date) for a in active})

        if not days:
            c.setFont("Helvetica", 12)
            c.drawString(self.margin, self.page_height - self.margin - 20, "No shifts scheduled")
            c.showPage()
            return

        by_cell = {}
        for assignment in active:
            by_cell[(assignment.employee_id, parse_date(assignment.date))] = assignment

        weeks = sorted({week_start(d) for d in days})
        for week in weeks:
            self._draw_week(c, week, by_cell, employees_map)

        if requirements:
            self._draw_summary_page(c, active, requirements, days, holidays)

    def _draw_week(self, c, week: date, by_cell: dict, employees_map: dict[str, Employee]) -> None:
        """Draw one week's grid, continuing onto further pages if needed."""
        week_days = [week + timedelta(days=i) for i in range(7)]
        employee_ids = sorted(
            {emp_id for emp_id, day in by_cell if week <= day <= week_days[-1]},
            key=lambda emp_id: (employees_map[emp_id].name if emp_id in employees_map else emp_id),
        )

        row_height = 22
        header_height = 70
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        name_width = 150
        column_width = (self.page_width - 2 * self.margin - name_width) / 7

        pages = max(1, (len(employee_ids) + rows_per_page - 1) // rows_per_page)
        for page in range(pages):
            page_ids = employee_ids[page * rows_per_page : (page + 1) * rows_per_page]

            c.setFont("Helvetica-Bold", 16)
            c.drawString(
                self.margin,
                self.page_height - self.margin - 20,
                f"Dispatch Roster - Week of {week.strftime('%B %d, %Y')}",
            )

            # Day headers
            y = self.page_height - self.margin - header_height + 10
            c.setFont("Helvetica-Bold", 9)
            for i, day in enumerate(week_days):
                x = self.margin + name_width + i * column_width
                c.drawCentredString(x + column_width / 2, y, day.strftime("%a %m/%d"))

            for employee_id in page_ids:
                y -= row_height
                employee = employees_map.get(employee_id)
                self._draw_row(
                    c,
                    employee_id,
                    employee,
                    week_days,
                    by_cell,
                    y,
                    name_width,
                    column_width,
                    row_height - 3,
                )

            self._draw_legend(c, self.margin, self.margin + 10)
            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2, self.margin - 10, f"Page {page + 1} of {pages}"
            )
            c.showPage()

    def _draw_row(
        self,
        c,
        employee_id: str,
        employee: Optional[Employee],
        week_days: list[date],
        by_cell: dict,
        y: float,
        name_width: float,
        column_width: float,
        height: float,
    ) -> None:
        """Draw a single employee's week."""
        name = employee.name if employee else employee_id
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin, y + height / 2 - 1, name[:24])
        if employee is not None:
            c.setFont("Helvetica", 7)
            subtitle = f"{employee.role.value}, {employee.shift_pattern.label}"
            c.drawString(self.margin, y + 1, subtitle)

        for i, day in enumerate(week_days):
            x = self.margin + name_width + i * column_width
            assignment = by_cell.get((employee_id, day))
            if assignment is None:
                c.setFillColorRGB(*COLORS["off"])
                c.rect(x + 1, y, column_width - 2, height, fill=1, stroke=0)
                continue

            hours = assignment.duration_hours
            c.setFillColorRGB(*COLORS.get(int(hours), COLORS["other"]))
            c.rect(x + 1, y, column_width - 2, height, fill=1, stroke=0)
            if assignment.is_supervisor:
                c.setStrokeColorRGB(*COLORS["supervisor"])
                c.setLineWidth(1.5)
                c.rect(x + 1, y, column_width - 2, height, fill=0, stroke=1)

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica", 8)
            c.drawCentredString(
                x + column_width / 2,
                y + height / 2 - 3,
                f"{assignment.start_time}-{assignment.end_time} ({format_hours(hours)}h)",
            )

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [(10, "10h"), (12, "12h"), (4, "4h")]
        offset = x + 45
        c.setFont("Helvetica", 8)
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(offset, y - 2, 12, 9, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(offset + 16, y, label)
            offset += 50

        c.setStrokeColorRGB(*COLORS["supervisor"])
        c.setLineWidth(1.5)
        c.rect(offset, y - 2, 12, 9, fill=0, stroke=1)
        c.drawString(offset + 16, y, "Supervisor")

    def _draw_summary_page(self, c, assignments, requirements, days, holidays) -> None:
        """Draw the staffing summary: every block still below its minimum."""
        levels = calculate_staffing_levels(assignments, requirements, days, holidays)
        short = [level for level in levels if not level.is_met]

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        y = self.page_height - self.margin - 20
        c.drawString(self.margin, y, "Staffing Summary")

        c.setFont("Helvetica", 10)
        y -= 20
        c.drawString(
            self.margin, y, f"Blocks evaluated: {len(levels)}   Below minimum: {len(short)}"
        )

        total_hours = sum(a.duration_hours for a in assignments)
        y -= 14
        c.drawString(
            self.margin, y, f"Shifts: {len(assignments)}   Total hours: {format_hours(total_hours)}"
        )

        y -= 30
        c.setFont("Helvetica-Bold", 10)
        for x_offset, title in ((0, "Date"), (90, "Block"), (190, "Staff"), (260, "Supervisors")):
            c.drawString(self.margin + x_offset, y, title)

        c.setFont("Helvetica", 9)
        for level in short:
            y -= 14
            if y < self.margin + 20:
                c.showPage()
                c.setFont("Helvetica", 9)
                y = self.page_height - self.margin - 20
            c.drawString(self.margin, y, level.date)
            c.drawString(self.margin + 90, y, level.time_range)
            c.drawString(self.margin + 190, y, f"{level.current_staff}/{level.required_staff}")
            c.drawString(self.margin + 260, y, f"{level.supervisors}/{level.required_supervisors}")

        c.showPage()
