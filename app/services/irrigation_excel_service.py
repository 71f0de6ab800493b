"""
Irrigation Schedule Excel Export Service.
Generates Excel reports for irrigation allocation results.
"""
from io import BytesIO
from datetime import datetime
from typing import Any, Dict, List, Optional
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

IRRIGATION_BLUE = "2563EB"
IRRIGATION_DARK = "1E40AF"
HEADER_BG = "DBEAFE"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class IrrigationExcelService:
    """Service for generating irrigation schedule Excel reports."""

    def __init__(self):
        self.header_fill = PatternFill(start_color=IRRIGATION_DARK, end_color=IRRIGATION_DARK, fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.title_font = Font(bold=True, size=16, color=IRRIGATION_DARK)
        self.subtitle_font = Font(bold=True, size=12, color=IRRIGATION_BLUE)
        self.light_fill = PatternFill(start_color=HEADER_BG, end_color=HEADER_BG, fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def _apply_header_style(self, ws, row_num: int, max_col: int):
        """Apply header styling to a row."""
        for col in range(1, max_col + 1):
            cell = ws.cell(row=row_num, column=col)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.border

    def _auto_adjust_columns(self, ws):
        """Auto-adjust column widths."""
        for column in ws.columns:
            column_letter = get_column_letter(column[0].column)
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 40)

    def generate_schedule_excel(
        self,
        result: Dict[str, Any],
        request: Optional[Dict[str, Any]] = None
    ) -> BytesIO:
        """
        Generate an Excel report for an irrigation schedule.

        Args:
            result: Canonical success response (AllocationResult.to_dict())
            request: The raw request the schedule was computed from

        Returns:
            BytesIO with Excel file content
        """
        request = request or {}
        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary_sheet(wb, result, request)
        self._create_allocations_sheet(wb, result)

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _create_summary_sheet(self, wb, result: Dict[str, Any], request: Dict[str, Any]):
        ws = wb.create_sheet("Summary")
        row = 1

        ws.cell(row=row, column=1, value="IRRIGATION SCHEDULE").font = self.title_font
        ws.merge_cells(f'A{row}:D{row}')
        row += 1

        ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}").font = Font(italic=True)
        row += 2

        ws.cell(row=row, column=1, value="BUDGET AND TOTALS").font = self.subtitle_font
        row += 1

        info_data = [
            ("Algorithm:", result.get('algorithm')),
            ("Total water available:", request.get('totalWater')),
            ("Total water used:", result.get('totalWaterUsed')),
            ("Remaining water:", result.get('remainingWater')),
            ("Fields scheduled:", len(result.get('scheduled', []))),
        ]
        if result.get('totalTimeUsed') is not None:
            info_data.extend([
                ("Electricity budget:", request.get('totalElectricity')),
                ("Water delivery rate:", request.get('waterDeliveryRate')),
                ("Total time used:", result.get('totalTimeUsed')),
                ("Remaining electricity:", result.get('remainingElectricity')),
            ])

        for label, value in info_data:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)
            ws.cell(row=row, column=1).fill = self.light_fill
            row += 1

        self._auto_adjust_columns(ws)
        return ws

    def _allocation_columns(self, scheduled: List[Dict[str, Any]]) -> List[tuple]:
        columns = [
            ("Field", "name"),
            ("Moisture (%)", "moisture"),
            ("Water Needed", "need"),
            ("Allocated", "allocated"),
        ]
        if any('priority' in f for f in scheduled):
            columns.append(("Priority", "priority"))
        if any('timeNeeded' in f for f in scheduled):
            columns.append(("Time", "timeNeeded"))
        return columns

    def _create_allocations_sheet(self, wb, result: Dict[str, Any]):
        ws = wb.create_sheet("Allocations")
        scheduled = result.get('scheduled', [])
        columns = self._allocation_columns(scheduled)

        for col, (header, _) in enumerate(columns, start=1):
            ws.cell(row=1, column=col, value=header)
        self._apply_header_style(ws, 1, len(columns) + 1)
        ws.cell(row=1, column=len(columns) + 1, value="Coverage (%)")

        for row, field in enumerate(scheduled, start=2):
            for col, (_, key) in enumerate(columns, start=1):
                ws.cell(row=row, column=col, value=field.get(key)).border = self.border
            need = field.get('need') or 0
            coverage = round(field.get('allocated', 0) / need * 100, 1) if need > 0 else 100.0
            ws.cell(row=row, column=len(columns) + 1, value=coverage).border = self.border

        self._auto_adjust_columns(ws)
        return ws


irrigation_excel_service = IrrigationExcelService()
