"""
Tests for CartRepo (persistence gateway)
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from shopcart.domain.errors import StorageUnavailable
from shopcart.repos.cart_repo import CartRepo, prepare_for_update

from tests.conftest import make_cart, make_item, make_token


class TestPrepareForUpdate:

    def test_drops_storage_id(self):
        fields = prepare_for_update(make_cart(id="cart-1"))

        assert "id" not in fields
        assert set(fields) == {"user", "ip", "hash", "order", "date_created", "date_updated", "items"}

    def test_items_as_documents(self):
        item = make_item("prod-tee", 2, [{"codename": "print", "value": "Hi"}], order_code="OC-1")
        fields = prepare_for_update(make_cart(items=[item]))

        assert fields["items"] == [
            {
                "id": "prod-tee",
                "orderCode": "OC-1",
                "amount": 2.0,
                "properties": {},
                "requirements": [{"codename": "print", "value": "Hi"}],
            }
        ]


class TestCartRepo:

    def test_insert_and_find_by_hash(self, db):
        repo = CartRepo(db)
        token = make_token()
        created = repo.insert(make_cart(token, items=[make_item("prod-tee", 1.5)]))

        found = repo.find_by_hash(token)

        assert found.id == created.id
        assert found.items[0].amount == 1.5

    def test_find_by_hash_missing(self, db):
        assert CartRepo(db).find_by_hash(make_token()) is None

    def test_find_by_hash_skips_checked_out(self, db):
        repo = CartRepo(db)
        token = make_token()
        repo.insert(make_cart(token, order="order-1"))

        assert repo.find_by_hash(token) is None

    def test_update_fields_never_overwrites_id(self, db):
        repo = CartRepo(db)
        created = repo.insert(make_cart())

        updated = repo.update_fields(created.id, {"id": "other-id", "user": "u1"})

        assert updated.id == created.id
        assert updated.user == "u1"
        assert repo.get("other-id") is None

    def test_update_missing_cart(self, db):
        with pytest.raises(StorageUnavailable):
            CartRepo(db).update_fields("does-not-exist", {"user": "u1"})

    def test_find_updated_before(self, db):
        repo = CartRepo(db)
        now = datetime.now(timezone.utc)
        old = repo.insert(make_cart(when=now - timedelta(days=40)))
        repo.insert(make_cart(when=now))

        stale = repo.find_updated_before(now - timedelta(days=30))

        assert [c.id for c in stale] == [old.id]

    def test_remove(self, db):
        repo = CartRepo(db)
        created = repo.insert(make_cart())

        assert repo.remove(created.id) == created.id
        assert repo.get(created.id) is None

    def test_sqlalchemy_error_wrapped(self, db, monkeypatch):
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "execute", broken)

        with pytest.raises(StorageUnavailable):
            CartRepo(db).find_by_hash(make_token())
