"""Bulk entry import from CSV files.

The expected columns are those of the entry export. Header names are matched
case-insensitively, with spaces treated as underscores. Every row is submitted
through the same validation as a hand-entered entry; rows that fail are
reported individually and do not stop the rest of the file.
"""

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from agency_desk.common.logging import get_logger
from agency_desk.domain.errors import DeskError, ValidationError
from agency_desk.domain.models import Entry, EntryDraft, RedeemType, TenantContext
from agency_desk.domain.mutations import submit_entry
from agency_desk.domain.store import EntityStore

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("date", "category", "username", "page_name", "platform", "referral_code")


@dataclass(frozen=True)
class ImportRowError:
    """A CSV row that could not be imported.

    ``row`` is the file line the record starts on, counting the header as
    line 1.
    """

    row: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "message": self.message}


@dataclass
class ImportResult:
    """Outcome of an import: the new store plus per-row results."""

    store: EntityStore
    imported: list[Entry] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "imported": len(self.imported),
            "failed": len(self.errors),
            "errors": [e.to_dict() for e in self.errors],
        }


class CsvRow(dict):
    """Parsed row keyed by normalized header, remembering its file line."""

    def __init__(self, values: dict[str, str], line: int):
        super().__init__(values)
        self.line = line


def normalize_header(name: str) -> str:
    """Map a header cell to its entry field name."""
    return "_".join(name.strip().lower().split())


def parse_csv_text(text: str) -> list[CsvRow]:
    """Parse CSV text into rows keyed by normalized header.

    Blank rows are skipped. Each row keeps the line it starts on, so quoted
    cells spanning lines do not shift later row numbers.

    Raises:
        ValidationError: If the file is empty or lacks a required column.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = [normalize_header(cell) for cell in next(reader)]
    except StopIteration:
        raise ValidationError("The CSV file is empty.") from None

    missing = [col for col in REQUIRED_COLUMNS if col not in header]
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    rows = []
    start = reader.line_num + 1
    for cells in reader:
        line, start = start, reader.line_num + 1
        if not any(cell.strip() for cell in cells):
            continue
        cells = cells + [""] * (len(header) - len(cells))
        rows.append(CsvRow({name: value.strip() for name, value in zip(header, cells)}, line))
    return rows


def read_csv_file(path: str | Path) -> list[CsvRow]:
    """Read and parse an entry CSV file."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        return parse_csv_text(f.read())


def _number(value: str, field_name: str, cast: type) -> Any:
    try:
        return cast(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name.replace('_', ' ')}: {value}", field=field_name) from None


def row_to_draft(row: dict[str, str]) -> EntryDraft:
    """Convert one parsed row into an entry draft.

    Enum and option values are validated later by ``submit_entry``.
    """
    amount = row.get("amount", "")
    points = row.get("points_load", "")
    return EntryDraft(
        date=row["date"],
        category=row["category"],
        username=row["username"],
        page_name=row["page_name"],
        platform=row["platform"],
        referral_code=row["referral_code"],
        amount=_number(amount, "amount", float) if amount else None,
        points_load=_number(points, "points_load", int) if points else 0,
        redeem_type=row.get("redeem_type") or RedeemType.ALREADY_PAID,
        payment_method=row.get("payment_method", ""),
        player_history=row.get("player_history", ""),
        agent_name=row.get("agent_name") or None,
    )


def import_entries(
    store: EntityStore,
    ctx: TenantContext,
    rows: Iterable[dict[str, str]],
    overwrite: bool = False,
) -> ImportResult:
    """Submit parsed rows as new entries of the tenant.

    Args:
        store: Current store.
        ctx: Tenant the entries belong to.
        rows: Rows from ``parse_csv_text`` or ``read_csv_file``.
        overwrite: Drop the tenant's existing entries first (merge otherwise).
            Ignored when no row imports.

    Returns:
        Import result holding the new store. Imported entries get fresh ids.
    """
    original = store
    if overwrite:
        store = store.with_entries(e for e in store.entries if e.business_id != ctx.tenant_id)

    result = ImportResult(store=store)
    for position, row in enumerate(rows, start=2):
        line = getattr(row, "line", position)
        try:
            result.store, entry = submit_entry(result.store, ctx, row_to_draft(row))
        except DeskError as e:
            result.errors.append(ImportRowError(row=line, message=str(e)))
            continue
        result.imported.append(entry)

    if not result.imported:
        result.store = original

    logger.info(
        "entries_imported",
        tenant_id=ctx.tenant_id,
        imported=len(result.imported),
        failed=len(result.errors),
        overwrite=overwrite,
    )
    return result
