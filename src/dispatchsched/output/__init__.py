"""Output generators for finished schedules."""

from dispatchsched.output.pdf_generator import RosterPDFGenerator
from dispatchsched.output.staffing_report import StaffingReportGenerator

__all__ = [
    "RosterPDFGenerator",
    "StaffingReportGenerator",
]
