from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import InvoiceStatus, PaymentMethod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_decimal
from .model import Invoice, InvoiceDraft, InvoiceLineItem
from .repository import InvoiceRepository

_COLUMNS = """
    invoice_id, invoice_number, parent_id, child_id, period_start, period_end, period_month, period_year,
    amount, discount, tax_amount, total_amount, status, due_date, payment_date, payment_method,
    transaction_id, created_at
"""


def _to_invoice(r: dict, lines: Sequence[InvoiceLineItem]) -> Invoice:
    return Invoice(
        invoice_id=int(r["invoice_id"]),
        invoice_number=r["invoice_number"],
        parent_id=int(r["parent_id"]),
        child_id=int(r["child_id"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        month=int(r["period_month"]),
        year=int(r["period_year"]),
        amount=to_decimal(r["amount"]),
        discount=to_decimal(r["discount"]),
        tax_amount=to_decimal(r["tax_amount"]),
        total_amount=to_decimal(r["total_amount"]),
        status=InvoiceStatus(r["status"]),
        due_date=r["due_date"],
        line_items=tuple(lines),
        payment_date=r.get("payment_date"),
        payment_method=PaymentMethod(r["payment_method"]) if r.get("payment_method") else None,
        transaction_id=r.get("transaction_id"),
        created_at=r.get("created_at"),
    )


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def next_invoice_sequence(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) is per-connection, so concurrent callers never read each other's value
            cur.execute("UPDATE invoice_sequence SET value = LAST_INSERT_ID(value + 1) WHERE id = 1")
            cur.execute("SELECT LAST_INSERT_ID() AS value")
            r = fetchone(cur)
            return int(r["value"])

    def create(self, *, invoice_number: str, draft: InvoiceDraft) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO invoices(
                    invoice_number, parent_id, child_id, period_start, period_end, period_month, period_year,
                    amount, discount, tax_amount, total_amount, status, due_date
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    invoice_number,
                    draft.parent_id,
                    draft.child_id,
                    draft.period_start,
                    draft.period_end,
                    draft.month,
                    draft.year,
                    draft.amount,
                    Decimal("0"),
                    draft.tax_amount,
                    draft.total_amount,
                    draft.status.value,
                    draft.due_date,
                ),
            )
            invoice_id = int(cur.lastrowid)
            if draft.line_items:
                cur.executemany(
                    """
                    INSERT INTO invoice_line_items(invoice_id, position, description, amount, quantity, hours)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (invoice_id, pos, line.description, line.amount, line.quantity, line.hours)
                        for pos, line in enumerate(draft.line_items, start=1)
                    ],
                )
            return invoice_id

    def _load_lines(self, cur, invoice_ids: Sequence[int]) -> dict[int, list[InvoiceLineItem]]:
        lines: dict[int, list[InvoiceLineItem]] = defaultdict(list)
        if not invoice_ids:
            return lines
        cur.execute(
            f"""
            SELECT invoice_id, description, amount, quantity, hours
            FROM invoice_line_items
            WHERE invoice_id IN ({in_clause(invoice_ids)})
            ORDER BY invoice_id, position
            """,
            tuple(invoice_ids),
        )
        for r in fetchall(cur):
            lines[int(r["invoice_id"])].append(
                InvoiceLineItem(
                    description=r["description"],
                    amount=to_decimal(r["amount"]),
                    quantity=int(r["quantity"]),
                    hours=to_decimal(r["hours"]) if r.get("hours") is not None else None,
                )
            )
        return lines

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invoices WHERE invoice_id=%s", (int(invoice_id),))
            r = fetchone(cur)
            if not r:
                return None
            lines = self._load_lines(cur, [int(r["invoice_id"])])
            return _to_invoice(r, lines[int(r["invoice_id"])])

    def list(
        self,
        *,
        parent_id: Optional[int] = None,
        child_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
    ) -> Sequence[Invoice]:
        clauses = ["1=1"]
        params: list[object] = []
        if parent_id is not None:
            clauses.append("parent_id=%s")
            params.append(int(parent_id))
        if child_id is not None:
            clauses.append("child_id=%s")
            params.append(int(child_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if period_start is not None:
            clauses.append("period_start>=%s")
            params.append(period_start)
        if period_end is not None:
            clauses.append("period_end<=%s")
            params.append(period_end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM invoices
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at DESC, invoice_id DESC
                """,
                tuple(params),
            )
            rows = fetchall(cur)
            lines = self._load_lines(cur, [int(r["invoice_id"]) for r in rows])
            return [_to_invoice(r, lines[int(r["invoice_id"])]) for r in rows]

    def update_status(self, *, invoice_id: int, status: InvoiceStatus, due_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invoices SET status=%s, due_date=%s WHERE invoice_id=%s",
                (status.value, due_date, int(invoice_id)),
            )
            return cur.rowcount > 0

    def update_amounts(
        self,
        *,
        invoice_id: int,
        discount: Decimal,
        tax_amount: Decimal,
        total_amount: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invoices
                SET discount=%s, tax_amount=%s, total_amount=%s
                WHERE invoice_id=%s AND status='pending'
                """,
                (discount, tax_amount, total_amount, int(invoice_id)),
            )
            return cur.rowcount > 0

    def mark_paid(
        self,
        *,
        invoice_id: int,
        payment_method: PaymentMethod,
        transaction_id: Optional[str],
        payment_date: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invoices
                SET status='paid', payment_method=%s, transaction_id=%s, payment_date=%s
                WHERE invoice_id=%s AND status='pending'
                """,
                (payment_method.value, transaction_id, payment_date, int(invoice_id)),
            )
            return cur.rowcount > 0
