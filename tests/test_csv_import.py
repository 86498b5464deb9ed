"""Tests for bulk CSV entry import."""

from pathlib import Path

import pytest

from agency_desk.domain.errors import ValidationError
from agency_desk.domain.models import Category, ReferralCode, Source, TenantContext
from agency_desk.domain.store import EntityStore
from agency_desk.reporting.export import entry_records, to_csv_text
from agency_desk.storage.csv_import import (
    import_entries,
    normalize_header,
    parse_csv_text,
    read_csv_file,
    row_to_draft,
)

HEADER = "Date,Category,Username,Page Name,Platform,Referral Code,Amount,Payment Method,Player History"


class TestParseCsv:
    """Test CSV parsing."""

    def test_headers_are_normalized(self):
        rows = parse_csv_text(f"{HEADER}\n2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n")

        assert rows == [
            {
                "date": "2024-05-10",
                "category": "Recharge",
                "username": "p1",
                "page_name": "Gaming Slots",
                "platform": "Juwa",
                "referral_code": "FR2K",
                "amount": "20",
                "payment_method": "CashApp",
                "player_history": "Null",
            }
        ]

    def test_normalize_header(self):
        assert normalize_header("  Points  Load ") == "points_load"

    def test_byte_order_mark_is_ignored(self):
        rows = parse_csv_text("\ufeff" + HEADER + "\n")
        assert rows == []

    def test_empty_file(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_csv_text("")
        assert str(exc_info.value) == "The CSV file is empty."

    def test_missing_columns(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_csv_text("date,username\n")
        assert "category" in str(exc_info.value)

    def test_blank_and_short_rows(self):
        """Test blank rows are skipped and short rows padded."""
        rows = parse_csv_text(f"{HEADER}\n,,,\n2024-05-10,Freeplay,p1,Gaming Slots,Juwa,ADS\n")

        assert len(rows) == 1
        assert rows[0]["amount"] == ""

    def test_rows_remember_file_line(self):
        """Test line numbers survive blank rows and quoted multi-line cells."""
        rows = parse_csv_text(
            f"{HEADER}\n"
            "2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n"
            "\n"
            "2024-05-10,Recharge,\"p2\nline two\",Gaming Slots,Juwa,FR2K,20,CashApp,Null\n"
            "2024-05-11,Recharge,p3,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n"
        )

        assert [row.line for row in rows] == [2, 4, 6]

    def test_read_file(self, temp_dir: Path):
        path = temp_dir / "entries.csv"
        path.write_text("\ufeff" + HEADER + "\n2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n", encoding="utf-8")

        assert len(read_csv_file(path)) == 1


class TestRowToDraft:
    """Test row conversion."""

    def test_numbers(self):
        draft = row_to_draft(
            {"date": "2024-05-10", "category": "Recharge", "username": "p1",
             "page_name": "Gaming Slots", "platform": "Juwa", "referral_code": "FR2K",
             "amount": "12.50", "points_load": "1250"}
        )

        assert draft.amount == 12.5
        assert draft.points_load == 1250
        assert draft.agent_name is None

    def test_invalid_amount(self):
        with pytest.raises(ValidationError):
            row_to_draft(
                {"date": "2024-05-10", "category": "Recharge", "username": "p1",
                 "page_name": "Gaming Slots", "platform": "Juwa", "referral_code": "FR2K",
                 "amount": "ten"}
            )


class TestImportEntries:
    """Test import_entries."""

    def test_error_row_is_file_line(self, ctx: TenantContext):
        """Test a failing row after a blank line reports its own file line."""
        rows = parse_csv_text(
            f"{HEADER}\n"
            "2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n"
            "\n"
            "2024-05-10,Recharge,p2,Gaming Slots,Nowhere,FR2K,20,CashApp,Null\n"
        )

        result = import_entries(EntityStore(), ctx, rows)

        assert [e.row for e in result.errors] == [4]

    @pytest.mark.parametrize("amount", ["nan", "inf", "-1"])
    def test_invalid_amount_text_rejected(self, ctx: TenantContext, amount: str):
        rows = parse_csv_text(
            f"{HEADER}\n"
            f"2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,{amount},CashApp,Null\n"
            "2024-05-10,Recharge,p2,Gaming Slots,Juwa,FR2K,10,CashApp,Null\n"
        )

        result = import_entries(EntityStore(), ctx, rows)

        assert [e.amount for e in result.imported] == [10.0]
        assert [e.row for e in result.errors] == [2]


    def test_valid_and_invalid_rows(self, ctx: TenantContext):
        """Test bad rows are reported by line and the rest still import."""
        rows = parse_csv_text(
            f"{HEADER}\n"
            "2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n"
            "2024-05-10,Recharge,p2,Gaming Slots,Nowhere,FR2K,20,CashApp,Null\n"
            "2024-05-11,Freeplay,p3,Gaming Slots,Juwa,Random,15,,Null\n"
        )

        result = import_entries(EntityStore(), ctx, rows)

        assert [e.username for e in result.imported] == ["p1", "p3"]
        assert [e.row for e in result.errors] == [3]
        assert result.imported[1].amount == 0
        assert result.imported[1].source is Source.RANDOM
        assert result.imported[0].agent_name == ctx.actor
        assert result.to_dict()["failed"] == 1

    def test_merge_keeps_existing(self, ctx: TenantContext, make_entry):
        store = EntityStore().with_entries([make_entry(id=1)])
        rows = parse_csv_text(f"{HEADER}\n2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n")

        result = import_entries(store, ctx, rows)

        assert [e.id for e in result.store.entries] == [1, 2]

    def test_overwrite_drops_tenant_entries(self, ctx: TenantContext, make_entry):
        """Test overwrite only replaces the importing tenant's entries."""
        store = EntityStore().with_entries([make_entry(id=1), make_entry(id=2, business_id="biz_b")])
        rows = parse_csv_text(f"{HEADER}\n2024-05-10,Recharge,p1,Gaming Slots,Juwa,FR2K,20,CashApp,Null\n")

        result = import_entries(store, ctx, rows, overwrite=True)

        assert [(e.id, e.business_id) for e in result.store.entries] == [(2, "biz_b"), (3, "biz_a")]

    def test_failed_overwrite_keeps_entries(self, ctx: TenantContext, make_entry):
        """Test an overwrite where every row fails leaves existing entries."""
        store = EntityStore().with_entries([make_entry(id=1)])
        rows = parse_csv_text(f"{HEADER}\n2024-05-10,Recharge,p1,Nowhere,Juwa,FR2K,20,CashApp,Null\n")

        result = import_entries(store, ctx, rows, overwrite=True)

        assert result.imported == []
        assert result.store is store

    def test_export_can_be_reimported(self, ctx: TenantContext, make_entry):
        """Test an entry export is accepted as import input."""
        exported = to_csv_text(
            entry_records([make_entry(amount=20), make_entry(category=Category.FREEPLAY,
                                                             referral_code=ReferralCode.ADS)])
        )

        result = import_entries(EntityStore(), ctx, parse_csv_text(exported))

        assert result.errors == []
        assert [e.referral_code for e in result.imported] == [ReferralCode.FR2K, ReferralCode.ADS]
        assert result.imported[0].agent_name == "ali"
