# Overview: Service-layer operations for reporting; dashboard and revenue/sales reports.

from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime

from sqlalchemy import func

from cafepos.extensions import db
from cafepos.models import Category, Order, OrderLine, Payment, Product
from cafepos.models.orders import ORDER_KIND_DIRECT, PAYMENT_METHODS
from cafepos.validation import ValidationError, from_cents
from cafepos.time_utils import day_bounds, parse_date, utcnow, week_start, to_utc_z

"""
Reporting semantics:
- Revenue is the sum of Payment.amount_cents; a transaction is one payment.
- Product sales count lines of "direct" (checkout) orders only. Pending
  table orders are not sales yet, and their items are re-sent at checkout.
- Date bounds are inclusive calendar days in UTC.
- Day/hour buckets are computed in Python so the queries stay portable
  across SQLite, MySQL and PostgreSQL.
"""

TOP_PRODUCTS_LIMIT = 10


class ReportError(ValidationError):
    """Raised when report parameters are invalid."""
    pass


def _parse_range(start: str | None, end: str | None) -> tuple[date, date]:
    if not start or not end:
        raise ReportError("startDate and endDate are required")
    try:
        start_day = parse_date(start)
        end_day = parse_date(end)
    except ValueError:
        raise ReportError("startDate and endDate must be YYYY-MM-DD dates")
    if start_day > end_day:
        raise ReportError("startDate must not be after endDate")
    return start_day, end_day


def _payments_query(branch_id: int | None, lower: datetime, upper: datetime):
    query = db.session.query(Payment).filter(Payment.paid_at >= lower, Payment.paid_at < upper)
    if branch_id is not None:
        query = query.filter(Payment.branch_id == branch_id)
    return query


def _payment_totals(branch_id: int | None, lower: datetime, upper: datetime) -> dict:
    query = db.session.query(
        func.coalesce(func.sum(Payment.amount_cents), 0),
        func.count(Payment.id),
    ).filter(Payment.paid_at >= lower, Payment.paid_at < upper)
    if branch_id is not None:
        query = query.filter(Payment.branch_id == branch_id)
    total_cents, count = query.one()
    return {"total_sales": from_cents(int(total_cents or 0)), "transaction_count": int(count or 0)}


def _by_method(branch_id: int | None, lower: datetime, upper: datetime) -> list[dict]:
    query = db.session.query(
        Payment.method,
        func.count(Payment.id).label("count"),
        func.coalesce(func.sum(Payment.amount_cents), 0).label("total_cents"),
    ).filter(Payment.paid_at >= lower, Payment.paid_at < upper)
    if branch_id is not None:
        query = query.filter(Payment.branch_id == branch_id)
    rows = query.group_by(Payment.method).all()
    rows = sorted(rows, key=lambda r: int(r.total_cents or 0), reverse=True)
    return [
        {
            "method": row.method,
            "count": int(row.count or 0),
            "total_amount": from_cents(int(row.total_cents or 0)),
        }
        for row in rows
    ]


def _bucket_payments(payments, key) -> list[dict]:
    buckets: "OrderedDict[object, list[int]]" = OrderedDict()
    for payment in sorted(payments, key=lambda p: p.paid_at):
        bucket = buckets.setdefault(key(payment.paid_at), [0, 0])
        bucket[0] += payment.amount_cents
        bucket[1] += 1
    return [
        {"key": k, "total_sales": from_cents(total), "transaction_count": count}
        for k, (total, count) in buckets.items()
    ]


def _daily(branch_id, lower, upper) -> list[dict]:
    rows = _bucket_payments(_payments_query(branch_id, lower, upper).all(), lambda dt: dt.date().isoformat())
    return [{"date": r.pop("key"), **r} for r in rows]


def _hourly(branch_id, day: date) -> list[dict]:
    lower, upper = day_bounds(day)
    rows = _bucket_payments(_payments_query(branch_id, lower, upper).all(), lambda dt: dt.hour)
    return [{"hour": r.pop("key"), **r} for r in rows]


def _top_products(branch_id: int | None, lower: datetime, upper: datetime, limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    query = db.session.query(
        OrderLine.product_name,
        func.sum(OrderLine.quantity).label("total_quantity"),
        func.sum(OrderLine.line_total_cents).label("total_cents"),
        func.count(func.distinct(Order.id)).label("order_count"),
    ).join(Order, OrderLine.order_id == Order.id).filter(
        Order.kind == ORDER_KIND_DIRECT,
        Order.created_at >= lower,
        Order.created_at < upper,
    )
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)

    rows = (
        query.group_by(OrderLine.product_name)
        .order_by(func.sum(OrderLine.quantity).desc(), OrderLine.product_name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "product_name": row.product_name,
            "total_quantity": int(row.total_quantity or 0),
            "total_revenue": from_cents(int(row.total_cents or 0)),
            "order_count": int(row.order_count or 0),
        }
        for row in rows
    ]


def dashboard(*, branch_id: int, now: datetime | None = None) -> dict:
    """Sales overview for one branch relative to now (UTC)."""
    now = now or utcnow()
    today = now.date()
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)

    day_window = day_bounds(today)
    week_window = day_bounds(week_start(today), today)
    month_window = day_bounds(month_start, today)
    year_window = day_bounds(year_start, today)

    daily = _payment_totals(branch_id, *day_window)
    weekly = _payment_totals(branch_id, *week_window)
    monthly = _payment_totals(branch_id, *month_window)
    yearly = _payment_totals(branch_id, *year_window)

    payment_details = {method: 0.0 for method in PAYMENT_METHODS}
    for row in _by_method(branch_id, *day_window):
        payment_details[row["method"]] = row["total_amount"]

    recent = (
        db.session.query(Payment)
        .filter(Payment.branch_id == branch_id)
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
        .limit(10)
        .all()
    )

    return {
        "dailySales": daily["total_sales"],
        "dailyTransactions": daily["transaction_count"],
        "weeklySales": weekly["total_sales"],
        "weeklyTransactions": weekly["transaction_count"],
        "monthlySales": monthly["total_sales"],
        "monthlyTransactions": monthly["transaction_count"],
        "yearlySales": yearly["total_sales"],
        "yearlyTransactions": yearly["transaction_count"],
        "paymentDetails": payment_details,
        "recentSales": [p.to_dict() for p in recent],
        "dailySalesThisMonth": _daily(branch_id, *month_window),
        "topProducts": _top_products(branch_id, *month_window),
        "hourlySalesToday": _hourly(branch_id, today),
        "paymentTypeDistribution": _by_method(branch_id, *month_window),
        "generatedAt": to_utc_z(now),
    }


def revenue_report(*, start: str | None, end: str | None, branch_id: int | None = None, now: datetime | None = None) -> dict:
    start_day, end_day = _parse_range(start, end)
    lower, upper = day_bounds(start_day, end_day)
    today = (now or utcnow()).date()

    return {
        "startDate": start_day.isoformat(),
        "endDate": end_day.isoformat(),
        "totalRevenue": _payment_totals(branch_id, lower, upper),
        "paymentTypeRevenue": _by_method(branch_id, lower, upper),
        "dailyRevenue": _daily(branch_id, lower, upper),
        "hourlyRevenue": _hourly(branch_id, today),
    }


def sales_report(*, start: str | None, end: str | None, branch_id: int | None = None) -> dict:
    start_day, end_day = _parse_range(start, end)
    lower, upper = day_bounds(start_day, end_day)

    query = db.session.query(
        Category.id,
        Category.name,
        func.sum(OrderLine.line_total_cents).label("total_cents"),
        func.sum(OrderLine.quantity).label("total_quantity"),
    ).select_from(OrderLine).join(
        Order, OrderLine.order_id == Order.id
    ).join(
        Product, OrderLine.product_id == Product.id
    ).join(
        Category, Product.category_id == Category.id
    ).filter(
        Order.kind == ORDER_KIND_DIRECT,
        Order.created_at >= lower,
        Order.created_at < upper,
    )
    if branch_id is not None:
        query = query.filter(Order.branch_id == branch_id)

    category_rows = (
        query.group_by(Category.id, Category.name)
        .order_by(func.sum(OrderLine.line_total_cents).desc())
        .all()
    )

    return {
        "startDate": start_day.isoformat(),
        "endDate": end_day.isoformat(),
        "topProducts": _top_products(branch_id, lower, upper),
        "categorySales": [
            {
                "category_id": row.id,
                "category_name": row.name,
                "total_amount": from_cents(int(row.total_cents or 0)),
                "total_quantity": int(row.total_quantity or 0),
            }
            for row in category_rows
        ],
    }
