"""Risk-zone listing and dashboard counters over the database."""

from datetime import timedelta
from types import SimpleNamespace

from expiryguard.models.action_history import ActionHistory
from expiryguard.services import store
from expiryguard.services.suggestions import build_suggestions, dashboard_counts, load_risk_zone

from conftest import NOW, TODAY


def _donate(db, product_id):
    db.add(ActionHistory(product_id=product_id, action_type="donation", reason="r", actor="t"))
    db.commit()


def _discount(db, product_id, pct=30):
    db.add(ActionHistory(product_id=product_id, action_type="discount", discount_percentage=pct, reason="r", actor="t"))
    db.commit()


class TestBuildSuggestions:
    def test_keeps_input_order(self):
        products = [
            SimpleNamespace(id=3, quantity=20, avg_daily_sales=2, expiry_date=TODAY + timedelta(days=1)),
            SimpleNamespace(id=1, quantity=20, avg_daily_sales=2, expiry_date=TODAY + timedelta(days=5)),
            SimpleNamespace(id=2, quantity=20, avg_daily_sales=2, expiry_date=TODAY + timedelta(days=5)),
        ]
        out = build_suggestions(products, set(), NOW)
        assert [s.product.id for s in out] == [3, 1, 2]
        assert [s.days_left for s in out] == [1, 5, 5]

    def test_donated_ids_flag_products(self):
        products = [
            SimpleNamespace(id=1, quantity=20, avg_daily_sales=2, expiry_date=TODAY + timedelta(days=5)),
            SimpleNamespace(id=2, quantity=20, avg_daily_sales=2, expiry_date=TODAY + timedelta(days=5)),
        ]
        out = build_suggestions(products, {2}, NOW)
        assert (out[0].action, out[0].already_donated) == ("discount", False)
        assert (out[1].action, out[1].already_donated) == ("donation", True)

    def test_empty_batch(self):
        assert build_suggestions([], set(), NOW) == []


class TestCandidates:
    def test_window_and_stock_filter(self, db, make_product):
        today = make_product(days=0, name="today", quantity=3)
        edge = make_product(days=5, name="edge")
        make_product(days=6, name="too far")
        make_product(days=-1, name="expired")
        make_product(days=2, name="empty", quantity=0)

        found = store.list_candidate_products(db, NOW, 5)
        assert [p.id for p in found] == [today.id, edge.id]

    def test_sorted_by_expiry_then_insert_order(self, db, make_product):
        a = make_product(days=4, name="a")
        b = make_product(days=1, name="b")
        c = make_product(days=4, name="c")

        found = store.list_candidate_products(db, NOW, 5)
        assert [p.id for p in found] == [b.id, a.id, c.id]


class TestLoadRiskZone:
    def test_classifies_each_candidate(self, db, make_product):
        surplus = make_product(days=5, quantity=20, avg_daily_sales=2)
        slow = make_product(days=4, quantity=5, avg_daily_sales=0)
        urgent = make_product(days=0, quantity=3, avg_daily_sales=1)

        out = load_risk_zone(db, NOW)

        by_id = {s.product.id: s for s in out}
        assert [s.product.id for s in out] == [urgent.id, slow.id, surplus.id]
        assert by_id[surplus.id].action == "discount"
        assert by_id[slow.id].action == "donation"
        assert "today" in by_id[urgent.id].reason

    def test_donation_history_blocks_discount(self, db, make_product):
        p = make_product(days=5, quantity=20, avg_daily_sales=2)
        _donate(db, p.id)

        [s] = load_risk_zone(db, NOW)
        assert s.action == "donation"
        assert s.already_donated is True

    def test_discount_history_does_not_flag(self, db, make_product):
        p = make_product(days=5, quantity=20, avg_daily_sales=2)
        _discount(db, p.id)

        [s] = load_risk_zone(db, NOW)
        assert s.action == "discount"
        assert s.already_donated is False


class TestDashboardCounts:
    def test_four_counters(self, db, make_product):
        a = make_product(days=0)
        make_product(days=3, quantity=0)  # risk count ignores stock
        make_product(days=4)  # outside the 3 day dashboard window
        make_product(days=-2)
        _donate(db, a.id)
        _discount(db, a.id)
        _discount(db, 999)

        counts = dashboard_counts(db, NOW)
        assert counts == {
            "total_products": 4,
            "risk_products": 2,
            "discounted": 2,
            "donated": 1,
        }

    def test_empty_store(self, db):
        assert dashboard_counts(db, NOW) == {
            "total_products": 0,
            "risk_products": 0,
            "discounted": 0,
            "donated": 0,
        }
