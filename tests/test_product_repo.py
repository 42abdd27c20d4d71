"""Tests for the product repository."""
from decimal import Decimal

from sqlmodel import Session

from app.models.product import Product


def _product(sku="ABC-1", **overrides):
    values = {
        "sku": sku,
        "title": "Chew Toy",
        "brand": "Pawsome",
        "image_file": "Front_Photo.jpg",
        "case_pack_size": 12,
        "msrp": Decimal("199.00"),
        "in_stock": "Y",
    }
    values.update(overrides)
    return Product(**values)


def test_upsert_inserts_new_row(repo, session):
    created = repo.upsert(session, _product())

    assert created.sku == "ABC-1"
    assert created.title == "Chew Toy"
    assert created.case_pack_size == 12


def test_upsert_overwrites_every_column(repo, engine):
    with Session(engine) as session:
        repo.upsert(session, _product())

    with Session(engine) as session:
        repo.upsert(session, _product(title="Rope Toy", brand=None, case_pack_size=None))

    with Session(engine) as session:
        row = repo.find_by_sku(session, "ABC-1")
        assert row.title == "Rope Toy"
        assert row.brand is None
        assert row.case_pack_size is None
        assert len(repo.list(session)) == 1


def test_find_by_sku_missing(repo, session):
    assert repo.find_by_sku(session, "NOPE") is None


def test_update_changes_only_target_row(repo, engine):
    with Session(engine) as session:
        repo.upsert(session, _product("A-1"))
        repo.upsert(session, _product("B-1"))

        changed = repo.update(session, "A-1", {"title": "Updated"})
        assert changed == 1

    with Session(engine) as session:
        assert repo.find_by_sku(session, "A-1").title == "Updated"
        assert repo.find_by_sku(session, "B-1").title == "Chew Toy"


def test_update_missing_sku_affects_nothing(repo, session):
    assert repo.update(session, "NOPE", {"title": "x"}) == 0
    assert repo.find_by_sku(session, "NOPE") is None


def test_delete_is_idempotent(repo, engine):
    with Session(engine) as session:
        repo.upsert(session, _product())
        assert repo.delete(session, "ABC-1") == 1
        assert repo.delete(session, "ABC-1") == 0

    with Session(engine) as session:
        assert repo.find_by_sku(session, "ABC-1") is None


def test_list_orders_by_sku_and_paginates(repo, session):
    for sku in ["C-1", "A-1", "B-1"]:
        repo.upsert(session, _product(sku))

    assert [p.sku for p in repo.list(session)] == ["A-1", "B-1", "C-1"]
    assert [p.sku for p in repo.list(session, skip=1, limit=1)] == ["B-1"]
