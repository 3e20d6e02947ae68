from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from rdl.domain.errors import LedgerStateError
from rdl.services.ledger_service import LedgerService

log = logging.getLogger(__name__)


class ExportService:
    def export_ledger_excel(self, ledger: LedgerService, path: Path | str) -> Path:
        """
        Sheets:
          Summary | Periods
        Summary holds the debt record, per-period totals and the pending delta.
        """
        if ledger.record is None:
            raise LedgerStateError("Ledger has not been loaded.")

        record = ledger.record
        current = ledger.current_period
        totals = ledger.totals()
        pending = ledger.incremental_amount_due()
        number_format = "#,##0" if ledger.currency_places == 0 else "#,##0." + "0" * ledger.currency_places

        wb = Workbook()

        def money(cell):
            cell.number_format = number_format

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        def add_table(ws, name: str, start_row: int, start_col: int, end_row: int, end_col: int):
            ref = f"{get_column_letter(start_col)}{start_row}:{get_column_letter(end_col)}{end_row}"
            tab = Table(displayName=name, ref=ref)
            tab.tableStyleInfo = TableStyleInfo(
                name="TableStyleMedium9",
                showRowStripes=True,
                showColumnStripes=False,
            )
            ws.add_table(tab)

        # -------- 1) Summary --------
        ws = wb.active
        ws.title = "Summary"
        ws["A1"] = f"Receipt debt {record.code}"
        ws["A1"].font = Font(bold=True, size=14)

        rows = [
            ("Counterparty", record.counterparty_name or "", "text"),
            ("Type", record.kind.value, "text"),
            ("Status", record.status.label, "text"),
            ("Due date", record.due_date.isoformat() if record.due_date else "", "text"),
            ("Total amount", float(record.total_amount), "money"),
            ("Paid amount", float(record.paid_amount), "money"),
            ("Remaining amount", float(record.remaining_amount), "money"),
            ("New period amount (unsaved)", float(pending), "money"),
        ]

        start_row = 3
        for i, (label, val, kind) in enumerate(rows):
            r = start_row + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            if kind == "money":
                money(ws[f"B{r}"])

        header_row = start_row + len(rows) + 1
        ws[f"A{header_row}"] = "Period"
        ws[f"B{header_row}"] = "Quantity"
        ws[f"C{header_row}"] = "Amount"
        bold_row(ws, header_row)

        r = header_row
        for p in totals.periods:
            r += 1
            ws[f"A{r}"] = p.period
            ws[f"B{r}"] = int(p.quantity)
            ws[f"C{r}"] = float(p.amount)
            money(ws[f"C{r}"])

        r += 1
        ws[f"A{r}"] = "Total"
        ws[f"B{r}"] = int(totals.quantity)
        ws[f"C{r}"] = float(totals.amount)
        money(ws[f"C{r}"])
        bold_row(ws, r)

        set_widths(ws, {"A": 30, "B": 28, "C": 18})

        # -------- 2) Periods --------
        ws2 = wb.create_sheet("Periods")
        ws2.append([
            "Period", "Editable", "Product Code", "Product Name",
            "Qty", "Baseline Qty", "Returned Qty", "Unit Price",
            "Line Total", "Ship Now", "Changed",
        ])
        bold_row(ws2, 1)

        out_row = 2
        for key, it in ledger.store.all_items():
            ws2.append([
                key, "yes" if key == current else "no", it.product_code or "", it.product_name,
                int(it.quantity), int(it.original_quantity), int(it.returned_quantity or 0), float(it.selling_price),
                float(it.selling_price * it.effective_quantity), "yes" if it.ship_now else "no", "yes" if it.dirty else "no",
            ])
            money(ws2[f"H{out_row}"])
            money(ws2[f"I{out_row}"])
            out_row += 1

        ws2.freeze_panes = "A2"
        set_widths(ws2, {
            "A": 12, "B": 9, "C": 14, "D": 34,
            "E": 8, "F": 12, "G": 12, "H": 14,
            "I": 16, "J": 9, "K": 9,
        })
        if ws2.max_row >= 2:
            add_table(ws2, "PeriodItems", 1, 1, ws2.max_row, 11)

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        wb.save(target)
        log.info("ledger_exported debt_id=%s path=%s", record.id, target)
        return target
