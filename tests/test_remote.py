"""Store access through RemoteStore."""
from decimal import Decimal

import pytest

from storedash import crud
from storedash.errors import StoreReadError


async def test_fetch_products_newest_id_first(remote, seed):
    products = await remote.fetch_products()
    assert [p.id for p in products] == [42, 13, 7]
    notebook = products[0]
    assert notebook.name == "Notebook"
    assert notebook.price == Decimal("4.50")
    assert notebook.image.startswith("data:image/png")


async def test_fetch_orders_most_recent_first(remote, seed):
    orders = await remote.fetch_orders()
    assert [o.id for o in orders] == ["ord_2", "ord_1"]
    ada = orders[1]
    assert ada.customer_name == "Ada"
    assert [i.quantity for i in ada.items] == [1, 2]
    assert ada.items[1].subtotal == Decimal("9.00")


async def test_update_order_status_writes_one_row(remote, seed):
    assert await remote.update_order_status("ord_1", "Cancelled") == 1
    orders = {o.id: o for o in await remote.fetch_orders()}
    assert orders["ord_1"].status == "Cancelled"
    assert orders["ord_2"].status == "Processing"


async def test_update_unknown_order_matches_nothing(remote, seed):
    assert await remote.update_order_status("ord_404", "Shipped") == 0


async def test_missing_table_raises_store_read_error(remote, engine):
    with engine.begin() as conn:
        conn.exec_driver_sql('DROP TABLE "Products"')
    with pytest.raises(StoreReadError):
        await remote.fetch_products()


async def test_diagnose_reports_count(remote, seed):
    report = await remote.diagnose()
    assert report.product_count == 3
    assert report.readable is True
    assert report.errors == []
    assert report.store.startswith("sqlite")


async def test_diagnose_reports_missing_table(remote, engine):
    with engine.begin() as conn:
        conn.exec_driver_sql('DROP TABLE "Products"')
    report = await remote.diagnose()
    assert report.product_count is None
    assert report.readable is False
    assert len(report.errors) == 2


def test_list_rows_rejects_unknown_collection(session_factory):
    db = session_factory()
    try:
        with pytest.raises(KeyError):
            crud.list_rows(db, "Customers")
    finally:
        db.close()


def test_default_store_uses_configured_session_factory():
    from storedash import database
    from storedash.remote import RemoteStore

    store = RemoteStore()
    assert store.engine is database.engine
    assert store._session_factory is database.SessionLocal
