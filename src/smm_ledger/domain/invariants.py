"""Ledger reconciliation checks.

  INV-L1: every account balance equals the sum of its ledger entries.
  INV-L2: the ledger's DEPOSIT_APPROVED credits equal the approved balance
          requests, one entry per request.
  INV-L3: net order debits (ORDER_DEBIT + ORDER_REFUND) equal the totals of
          non-cancelled orders.

Together they give balance == approved requests - live orders + admin adjustments.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_BALANCE_MISMATCH_SQL = text("""
    SELECT a.user_id, a.balance, COALESCE(SUM(l.amount), 0) AS ledger_sum
    FROM accounts a
    LEFT JOIN ledger_entries l ON l.user_id = a.user_id
    GROUP BY a.user_id, a.balance
    HAVING a.balance <> COALESCE(SUM(l.amount), 0)
""")
_APPROVED_SUM_SQL = text("""
    SELECT COALESCE(SUM(amount), 0) AS total, COUNT(*) AS n
    FROM balance_requests WHERE status = 'APPROVED'
""")
_DEPOSIT_LEDGER_SQL = text("""
    SELECT COALESCE(SUM(amount), 0) AS total, COUNT(DISTINCT reference_id) AS n,
           COUNT(*) AS entries
    FROM ledger_entries WHERE entry_type = 'DEPOSIT_APPROVED'
""")
_LIVE_ORDERS_SQL = text("""
    SELECT COALESCE(SUM(total_price), 0)
    FROM orders WHERE status <> 'CANCELLED'
""")
_ORDER_LEDGER_SQL = text("""
    SELECT COALESCE(-SUM(amount), 0)
    FROM ledger_entries WHERE entry_type IN ('ORDER_DEBIT', 'ORDER_REFUND')
""")
_NEGATIVE_SQL = text("SELECT COUNT(*) FROM accounts WHERE balance < 0")


async def verify_ledger_invariants(db: AsyncSession) -> list[str]:
    """Run all reconciliation checks. Returns list of violation strings."""
    violations: list[str] = []

    negative = (await db.execute(_NEGATIVE_SQL)).scalar_one()
    if negative:
        violations.append(f"INV-L0 violated: {negative} account(s) with negative balance")

    for row in (await db.execute(_BALANCE_MISMATCH_SQL)).fetchall():
        violations.append(
            f"INV-L1 violated: user {row.user_id} balance={row.balance} "
            f"!= ledger_sum={row.ledger_sum}"
        )

    approved = (await db.execute(_APPROVED_SUM_SQL)).fetchone()
    deposits = (await db.execute(_DEPOSIT_LEDGER_SQL)).fetchone()
    if approved is not None and deposits is not None:
        if approved.total != deposits.total or approved.n != deposits.n:
            violations.append(
                f"INV-L2 violated: approved requests {approved.n} totalling "
                f"{approved.total} != {deposits.n} credited totalling {deposits.total}"
            )
        if deposits.entries != deposits.n:
            violations.append(
                f"INV-L2 violated: {deposits.entries - deposits.n} duplicate approval credit(s)"
            )

    live_orders = (await db.execute(_LIVE_ORDERS_SQL)).scalar_one()
    order_debits = (await db.execute(_ORDER_LEDGER_SQL)).scalar_one()
    if live_orders != order_debits:
        violations.append(
            f"INV-L3 violated: live order totals={live_orders} "
            f"!= net order debits={order_debits}"
        )

    for msg in violations:
        logger.error(msg)
    return violations
