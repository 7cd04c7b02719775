from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storefront.data.models import OrderItemModel, OrderModel
from storefront.domain.order_state import OrderStatus
from storefront.tasks import expire
from storefront.tasks.expire import expire_carts, expire_carts_task

NOW = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_order(db, make_product, make_user):
    make_user(1)
    make_user(2)
    make_user(3)
    make_product("A", {"M": 5})

    def _make(user_id, status=OrderStatus.CART, age_hours=0, now=NOW):
        stamp = now - timedelta(hours=age_hours)
        order = OrderModel(user_id=user_id, status=int(status), created_at=stamp, last_updated=stamp)
        order.items = [OrderItemModel(article_number="A", size="M", quantity=1)]
        db.add(order)
        db.flush()
        order_id = order.id
        db.commit()
        return order_id

    return _make


def remaining(db):
    db.expire_all()
    ids = set(db.execute(select(OrderModel.id)).scalars())
    items = db.execute(select(func.count(OrderItemModel.id))).scalar_one()
    db.rollback()
    return ids, items


class TestExpireCarts:
    def test_removes_only_stale_carts(self, db, make_order):
        stale = make_order(1, age_hours=30)
        fresh = make_order(2, age_hours=1)
        old_order = make_order(3, status=OrderStatus.PLACED, age_hours=100)

        removed = expire_carts(db, now=NOW)

        assert removed == 1
        ids, items = remaining(db)
        assert stale not in ids
        assert ids == {fresh, old_order}
        assert items == 2

    def test_retention_is_configurable(self, db, make_order):
        make_order(1, age_hours=3)

        assert expire_carts(db, now=NOW, retention_hours=48) == 0
        assert expire_carts(db, now=NOW, retention_hours=2) == 1

    def test_nothing_to_do(self, db, make_order):
        assert expire_carts(db, now=NOW) == 0


class FakeLock:
    def __init__(self, token):
        self.token = token
        self.released = []

    def acquire(self, name, ttl):
        return self.token

    def release(self, name, token):
        self.released.append((name, token))
        return True


class TestExpireTask:
    def test_skips_when_lock_is_taken(self, monkeypatch):
        lock = FakeLock(None)
        monkeypatch.setattr(expire, "LockService", lambda: lock)
        monkeypatch.setattr(expire, "expire_carts", lambda db: pytest.fail("sweep must not run"))

        assert expire_carts_task() == 0
        assert lock.released == []

    def test_runs_and_releases_lock(self, db, make_order, monkeypatch):
        lock = FakeLock("tok")
        monkeypatch.setattr(expire, "LockService", lambda: lock)
        make_order(1, age_hours=10_000)
        make_order(2, age_hours=0, now=datetime.now(timezone.utc))

        assert expire_carts_task() == 1
        assert lock.released == [("expire-carts", "tok")]


class TestExpireFailures:
    def test_failed_row_does_not_stop_the_sweep(self, db, make_order, monkeypatch):
        first = make_order(1, age_hours=30)
        second = make_order(2, age_hours=40)
        execute = db.execute
        failures = []

        def flaky_execute(statement, *args, **kwargs):
            if not failures and str(statement).startswith("DELETE FROM orders"):
                failures.append(statement)
                raise OperationalError("DELETE FROM orders", {}, Exception("database is locked"))
            return execute(statement, *args, **kwargs)

        monkeypatch.setattr(db, "execute", flaky_execute)

        removed = expire_carts(db, now=NOW)

        monkeypatch.undo()
        assert removed == 1
        assert len(failures) == 1
        ids, items = remaining(db)
        assert len(ids & {first, second}) == 1
        assert items == 1
