from __future__ import annotations

import logging
from datetime import date, datetime, time
from io import BytesIO
from zipfile import BadZipFile

import xlsxwriter
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from forex_tracker.core.errors import ValidationError
from forex_tracker.services.goals import (
    GOAL_STATUSES,
    MAX_LEVEL_LENGTH,
    NOT_STARTED,
    Goal,
    goal_progress,
    multiplier,
    parse_amount,
    profit_target,
)
from forex_tracker.services.ledger import (
    DEPOSIT,
    ENTRY_KINDS,
    MAX_MILESTONE_LENGTH,
    TRADE,
    WITHDRAWAL,
    LedgerEntry,
    chronological,
    opening_balance,
)
from forex_tracker.services.tracker import TrackerState

logger = logging.getLogger(__name__)

LOG_SHEET = "Trading Log"
SETTINGS_SHEET = "Settings"

LOG_COLUMNS = ["Date", "Balance", "PNL", "Amount to Target", "Daily Gain %", "Type", "Milestone", "Milestone Value"]
SETTINGS_COLUMNS = ["Level", "StartBalance", "TargetBalance", "Status", "Progress", "Multiplier", "ProfitTarget"]

# Row (0-based) holding the Trading Log column headers; the summary block sits above it.
LOG_HEADER_ROW = 8


def export_filename(today: date) -> str:
    return f"Forex_Account_Tracker_{today.isoformat()}.xlsx"


def build_workbook(state: TrackerState, out_file) -> None:
    wb = xlsxwriter.Workbook(out_file, {"in_memory": True})
    base_font = "Calibri"

    meta_label = wb.add_format({"bold": True, "font_name": base_font, "font_size": 11, "font_color": "#334155"})
    meta_value = wb.add_format({"font_name": base_font, "font_size": 11, "font_color": "#0f172a"})
    meta_money = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "#,##0.00"})
    meta_pct = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "0.00%"})
    header = wb.add_format(
        {
            "bold": True,
            "font_name": base_font,
            "font_size": 11,
            "bg_color": "#F1F5F9",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
        }
    )
    date_fmt = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "yyyy-mm-dd", "border": 1})
    money2 = wb.add_format(
        {"font_name": base_font, "font_size": 11, "num_format": "#,##0.00", "border": 1, "align": "right"}
    )
    pct2 = wb.add_format({"font_name": base_font, "font_size": 11, "num_format": "0.00", "border": 1, "align": "right"})
    text_cell = wb.add_format({"font_name": base_font, "font_size": 11, "border": 1, "align": "left"})

    # ----------------------------
    # Sheet 1: Trading Log
    # ----------------------------
    ws = wb.add_worksheet(LOG_SHEET)
    ws.set_column(0, 0, 12)  # Date
    ws.set_column(1, 4, 18)  # Balance .. Daily Gain
    ws.set_column(5, 5, 12)  # Type
    ws.set_column(6, 6, 32)  # Milestone
    ws.set_column(7, 7, 16)  # Milestone Value

    sm = state.summary
    ws.write(1, 1, "Latest Balance", meta_label)
    ws.write_number(1, 2, sm.latest_balance, meta_money)
    ws.write(2, 1, "Target Status", meta_label)
    ws.write(2, 2, sm.target_status, meta_value)
    ws.write(3, 1, "Current Target", meta_label)
    ws.write_number(3, 2, sm.current_target, meta_money)
    ws.write(4, 1, "Start for this Target", meta_label)
    ws.write_number(4, 2, sm.start_for_target, meta_money)
    ws.write(5, 1, "Progress to Target", meta_label)
    ws.write_number(5, 2, sm.progress_to_target, meta_pct)
    ws.write(6, 1, "Progress Bar", meta_label)
    ws.write_number(6, 2, sm.progress_to_target, meta_pct)
    ws.conditional_format(6, 2, 6, 2, {"type": "data_bar", "min_type": "num", "min_value": 0, "max_type": "num", "max_value": 1})

    ws.set_row(LOG_HEADER_ROW, 18)
    for c, h in enumerate(LOG_COLUMNS):
        ws.write(LOG_HEADER_ROW, c, h, header)
    ws.freeze_panes(LOG_HEADER_ROW + 1, 1)

    r = LOG_HEADER_ROW + 1
    for e in chronological(state.entries):
        ws.write_datetime(r, 0, datetime.combine(e.date, time.min), date_fmt)
        ws.write_number(r, 1, e.balance, money2)
        ws.write_number(r, 2, e.pnl, money2)
        ws.write_number(r, 3, e.amount_to_target, money2)
        ws.write_number(r, 4, e.daily_gain, pct2)
        ws.write(r, 5, e.kind, text_cell)
        ws.write(r, 6, e.milestone or "", text_cell)
        if e.milestone_value is None:
            ws.write_blank(r, 7, None, money2)
        else:
            ws.write_number(r, 7, e.milestone_value, money2)
        r += 1

    if r > LOG_HEADER_ROW + 1:
        ws.autofilter(LOG_HEADER_ROW, 0, r - 1, len(LOG_COLUMNS) - 1)

    # ----------------------------
    # Sheet 2: Settings (goal ladder)
    # ----------------------------
    gs = wb.add_worksheet(SETTINGS_SHEET)
    gs.set_column(0, 0, 14)
    gs.set_column(1, 2, 16)
    gs.set_column(3, 3, 14)
    gs.set_column(4, 6, 14)
    for c, h in enumerate(SETTINGS_COLUMNS):
        gs.write(0, c, h, header)

    for i, g in enumerate(state.goals, start=1):
        gs.write(i, 0, g.level, text_cell)
        gs.write_number(i, 1, g.start_balance, money2)
        gs.write_number(i, 2, g.target_balance, money2)
        gs.write(i, 3, g.status, text_cell)
        gs.write_number(i, 4, goal_progress(g, sm.latest_balance), pct2)
        gs.write(i, 5, multiplier(g), text_cell)
        gs.write_number(i, 6, profit_target(g), money2)

    wb.close()


def _cell_date(v) -> date | None:
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v).strip()[:10])
    except ValueError:
        return None


def _header_index(row) -> dict[str, int]:
    return {str(v).strip(): i for i, v in enumerate(row) if v is not None and str(v).strip()}


def _get(row, cols: dict[str, int], name: str):
    i = cols.get(name)
    if i is None or i >= len(row):
        return None
    return row[i]


def _read_entries(ws, goals: list[Goal]) -> list[LedgerEntry]:
    rows = list(ws.iter_rows(values_only=True))
    header_at = next(
        (i for i, row in enumerate(rows) if row and isinstance(row[0], str) and row[0].strip() == "Date"),
        None,
    )
    if header_at is None:
        logger.warning("%s sheet has no header row; nothing imported", LOG_SHEET)
        return []
    cols = _header_index(rows[header_at])

    parsed: list[tuple[date, int, str, float, dict]] = []
    for n, row in enumerate(rows[header_at + 1 :], start=header_at + 2):
        raw_balance = _get(row, cols, "Balance")
        if raw_balance is None or raw_balance == "":
            continue
        day = _cell_date(_get(row, cols, "Date"))
        if day is None:
            logger.warning("skipping %s row %d: missing or invalid date", LOG_SHEET, n)
            continue
        try:
            balance = parse_amount(raw_balance, "Balance")
        except ValidationError:
            logger.warning("skipping %s row %d: balance %r is not a number", LOG_SHEET, n, raw_balance)
            continue

        kind = str(_get(row, cols, "Type") or TRADE).strip().lower()
        if kind not in ENTRY_KINDS:
            logger.warning("%s row %d: unknown type %r, importing as trade", LOG_SHEET, n, kind)
            kind = TRADE

        extra = {
            "milestone": str(_get(row, cols, "Milestone") or "").strip()[:MAX_MILESTONE_LENGTH],
            "milestone_value": _get(row, cols, "Milestone Value"),
        }
        parsed.append((day, len(parsed), kind, balance, extra))

    # Ids follow file order; deposit and withdrawal deltas follow the date order,
    # starting from the same seed the ledger will be recalculated with.
    amounts: dict[int, float] = {}
    previous = opening_balance([], goals)
    for day, pos, kind, balance, _ in sorted(parsed, key=lambda p: (p[0], p[1])):
        if kind in (DEPOSIT, WITHDRAWAL):
            amounts[pos] = abs(balance - previous)
        previous = balance

    entries: list[LedgerEntry] = []
    for day, pos, kind, balance, extra in parsed:
        mv = extra["milestone_value"]
        try:
            milestone_value = parse_amount(mv, "Milestone value") if mv not in (None, "") else None
        except ValidationError:
            milestone_value = None
        entries.append(
            LedgerEntry(
                id=pos + 1,
                date=day,
                kind=kind,
                # Trades are imported by balance so the file's balances are reproduced.
                balance=balance,
                amount=amounts.get(pos, 0.0),
                milestone=extra["milestone"],
                milestone_value=milestone_value,
            )
        )
    return entries


def _read_goals(ws) -> list[Goal]:
    rows = list(ws.iter_rows(values_only=True))
    if not rows:
        return []
    cols = _header_index(rows[0])

    goals: list[Goal] = []
    seen: set[str] = set()
    for n, row in enumerate(rows[1:], start=2):
        level = str(_get(row, cols, "Level") or "").strip()
        if not level:
            continue
        if len(level) > MAX_LEVEL_LENGTH:
            logger.warning("skipping %s row %d: goal name longer than %d characters", SETTINGS_SHEET, n, MAX_LEVEL_LENGTH)
            continue
        if level.lower() in seen:
            logger.warning("skipping %s row %d: duplicate goal %r", SETTINGS_SHEET, n, level)
            continue
        try:
            start = parse_amount(_get(row, cols, "StartBalance"), "StartBalance")
            target = parse_amount(_get(row, cols, "TargetBalance"), "TargetBalance")
        except ValidationError as e:
            logger.warning("skipping %s row %d: %s", SETTINGS_SHEET, n, e.message)
            continue

        status = str(_get(row, cols, "Status") or "").strip()
        if status not in GOAL_STATUSES:
            status = NOT_STARTED
        seen.add(level.lower())
        goals.append(Goal(level=level, start_balance=start, target_balance=target, status=status))
    return goals


def read_workbook(data: bytes) -> tuple[list[LedgerEntry], list[Goal]]:
    # Goals are taken as they are, without chain validation; ReplaceAll
    # settles them against the imported ledger.
    try:
        wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError):
        raise ValidationError("workbook_unreadable", "The uploaded file is not a readable .xlsx workbook")

    try:
        goals = _read_goals(wb[SETTINGS_SHEET]) if SETTINGS_SHEET in wb.sheetnames else []
        entries = _read_entries(wb[LOG_SHEET], goals) if LOG_SHEET in wb.sheetnames else []
    finally:
        wb.close()

    logger.info("read %d entries and %d goals from workbook", len(entries), len(goals))
    return entries, goals
