import random
from decimal import Decimal

from factories import make_expense, make_sale

from ledger.schemas.sales import SaleStatus
from ledger.services.aggregator import (
    Rollup,
    bucket_by_status,
    rollup,
    sale_cost_of_goods,
    sale_profit,
)


def sample_sales():
    return [
        make_sale(100, dtf_cost=5, items=[(2, 50, 10)]),
        make_sale("49.90", dtf_cost="3.25", status=SaleStatus.SHIPPED, items=[(1, 30, "12.40"), (3, 10, "2.15")]),
        make_sale("0.10", items=[]),
        make_sale(75, dtf_cost=0, status=SaleStatus.SHIPPED, items=[(5, 20, "7.33")]),
        make_sale("19.99", dtf_cost="0.01", items=[(1, "19.99", "19.99")]),
    ]


def test_sale_profit_example():
    sale = make_sale(100, dtf_cost=5, items=[(2, 60, 10)])

    assert sale_cost_of_goods(sale) == Decimal("20")
    assert sale_profit(sale) == Decimal("75")


def test_sale_profit_uses_total_not_item_prices():
    # Total below the item subtotal (discount) is taken as-is.
    sale = make_sale(80, dtf_cost=0, items=[(2, 50, 10)])

    assert sale_profit(sale) == Decimal("60")


def test_sale_without_items_has_no_cost_of_goods():
    sale = make_sale(30, dtf_cost=4)

    assert sale_cost_of_goods(sale) == Decimal("0")
    assert sale_profit(sale) == Decimal("26")


def test_empty_rollup_is_all_zero():
    totals = rollup([], [])

    assert totals == Rollup()
    assert totals.revenue == 0
    assert totals.net_profit == 0

    buckets = bucket_by_status([])
    assert buckets.pending_total == 0
    assert buckets.shipped_total == 0


def test_rollup_totals():
    sales = [
        make_sale(100, dtf_cost=5, items=[(2, 50, 10)]),
        make_sale(50, dtf_cost=2, status=SaleStatus.SHIPPED, items=[(1, 50, 20), (3, 0, 1)]),
    ]
    expenses = [make_expense(30), make_expense("12.50")]

    totals = rollup(sales, expenses)

    assert totals.revenue == Decimal("150")
    assert totals.cost_of_goods == Decimal("43")
    assert totals.surcharge_total == Decimal("7")
    assert totals.expense_total == Decimal("42.50")
    assert totals.net_profit == Decimal("57.50")


def test_net_profit_matches_formula_and_per_sale_profit():
    sales = sample_sales()
    expenses = [make_expense("10.05"), make_expense("3.20")]

    totals = rollup(sales, expenses)

    assert totals.net_profit == (
        totals.revenue - totals.cost_of_goods - totals.surcharge_total - totals.expense_total
    )
    assert sum(sale_profit(sale) for sale in sales) == rollup(sales, []).net_profit


def test_status_buckets_partition_revenue():
    sales = sample_sales()

    buckets = bucket_by_status(sales)

    assert buckets.pending_total == Decimal("120.09")
    assert buckets.shipped_total == Decimal("124.90")
    assert buckets.pending_total + buckets.shipped_total == rollup(sales, []).revenue


def test_dashboard_example():
    sales = [
        make_sale(100, status=SaleStatus.PENDING),
        make_sale(50, status=SaleStatus.SHIPPED),
    ]
    expenses = [make_expense(30)]

    totals = rollup(sales, expenses)
    buckets = bucket_by_status(sales)

    assert totals.revenue == 150
    assert buckets.pending_total == 100
    assert buckets.shipped_total == 50
    assert totals.expense_total == 30
    assert totals.net_profit == 120


def test_rollup_is_order_independent():
    sales = sample_sales()
    expenses = [make_expense("0.10"), make_expense("0.20"), make_expense("0.30")]
    expected = rollup(sales, expenses)

    shuffler = random.Random(7)
    for _ in range(10):
        shuffled_sales = sales[:]
        shuffled_expenses = expenses[:]
        shuffler.shuffle(shuffled_sales)
        shuffler.shuffle(shuffled_expenses)

        assert rollup(shuffled_sales, shuffled_expenses) == expected
        assert bucket_by_status(shuffled_sales) == bucket_by_status(sales)


def test_toggling_status_moves_revenue_between_buckets():
    sale = make_sale(40, status=SaleStatus.PENDING)
    shipped = sale.model_copy(update={"status": sale.status.toggled()})

    assert bucket_by_status([shipped]).shipped_total == 40
    back = shipped.model_copy(update={"status": shipped.status.toggled()})
    assert bucket_by_status([back]).pending_total == 40


def test_rollup_accepts_generators():
    sales = sample_sales()

    assert rollup((sale for sale in sales), iter([])) == rollup(sales, [])
