"""
Budget CRUD, the create-time overlap guard and /budgets/status.
"""

from decimal import Decimal


def budget_payload(category="Food", amount=200, start="2024-01-01", end="2024-01-31"):
    return {
        "category": category,
        "amount": amount,
        "start_date": f"{start}T00:00:00",
        "end_date": f"{end}T00:00:00",
    }


def create_budget(client, headers, **kwargs):
    resp = client.post("/budgets", json=budget_payload(**kwargs), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestCreateBudget:

    def test_create(self, client, auth):
        body = create_budget(client, auth)
        assert body["category"] == "Food"
        assert Decimal(body["amount"]) == Decimal("200")

    def test_end_before_start_is_rejected(self, client, auth):
        resp = client.post("/budgets", json=budget_payload(start="2024-02-01", end="2024-01-01"), headers=auth)
        assert resp.status_code == 422

    def test_single_day_budget_is_allowed(self, client, auth):
        create_budget(client, auth, start="2024-05-05", end="2024-05-05")

    def test_non_positive_amount_is_rejected(self, client, auth):
        resp = client.post("/budgets", json=budget_payload(amount=0), headers=auth)
        assert resp.status_code == 422

    def test_others_category_is_accepted(self, client, auth):
        create_budget(client, auth, category="Others")


class TestOverlapGuard:

    def test_overlapping_same_category_conflicts(self, client, auth):
        create_budget(client, auth, start="2024-01-01", end="2024-01-31")
        resp = client.post("/budgets", json=budget_payload(start="2024-01-15", end="2024-02-15"), headers=auth)
        assert resp.status_code == 409

    def test_boundary_touch_conflicts(self, client, auth):
        create_budget(client, auth, start="2024-01-01", end="2024-01-31")
        resp = client.post("/budgets", json=budget_payload(start="2024-01-31", end="2024-02-28"), headers=auth)
        assert resp.status_code == 409

    def test_adjacent_periods_do_not_conflict(self, client, auth):
        create_budget(client, auth, start="2024-01-01", end="2024-01-31")
        create_budget(client, auth, start="2024-02-01", end="2024-02-29")

    def test_different_category_does_not_conflict(self, client, auth):
        create_budget(client, auth, category="Food")
        create_budget(client, auth, category="Transport")

    def test_other_users_budget_does_not_conflict(self, client, auth, other_auth):
        create_budget(client, auth)
        create_budget(client, other_auth)

    def test_all_categories_sentinel_is_guarded_too(self, client, auth):
        create_budget(client, auth, category="All Categories")
        resp = client.post("/budgets", json=budget_payload(category="All Categories"), headers=auth)
        assert resp.status_code == 409


class TestBudgetCrud:

    def test_list_is_latest_start_first(self, client, auth):
        create_budget(client, auth, start="2024-01-01", end="2024-01-31")
        create_budget(client, auth, start="2024-03-01", end="2024-03-31")
        starts = [b["start_date"][:10] for b in client.get("/budgets", headers=auth).json()]
        assert starts == ["2024-03-01", "2024-01-01"]

    def test_update_rechecks_period(self, client, auth):
        budget = create_budget(client, auth, start="2024-01-10", end="2024-01-31")
        resp = client.patch(
            f"/budgets/{budget['id']}", json={"end_date": "2024-01-01T00:00:00"}, headers=auth
        )
        assert resp.status_code == 400

    def test_update_amount(self, client, auth):
        budget = create_budget(client, auth)
        resp = client.patch(f"/budgets/{budget['id']}", json={"amount": 350}, headers=auth)
        assert resp.status_code == 200
        assert Decimal(resp.json()["amount"]) == Decimal("350")

    def test_foreign_budget_is_not_found(self, client, auth, other_auth):
        budget = create_budget(client, auth)
        assert client.get(f"/budgets/{budget['id']}", headers=other_auth).status_code == 404
        assert client.delete(f"/budgets/{budget['id']}", headers=other_auth).status_code == 404
        assert client.delete(f"/budgets/{budget['id']}", headers=auth).status_code == 204


class TestBudgetStatus:

    def test_requires_both_dates(self, client, auth):
        resp = client.get("/budgets/status", params={"startDate": "2024-01-01"}, headers=auth)
        assert resp.status_code == 400

    def test_no_budgets_is_zero_not_404(self, client, auth):
        resp = client.get(
            "/budgets/status", params={"startDate": "2024-01-01", "endDate": "2024-12-31"}, headers=auth
        )
        assert resp.status_code == 200
        body = resp.json()
        assert Decimal(body["total_budgeted"]) == 0
        assert Decimal(body["total_spent"]) == 0
        assert body["budget_summary"] == []

    def test_status_uses_budget_window_for_spend(self, client, auth):
        create_budget(client, auth, category="Food", amount=200, start="2024-01-01", end="2024-01-31")
        for category, amount, when in [("Food", 50, "2024-01-05"), ("Food", 60, "2024-02-02"), ("Transport", 30, "2024-01-10")]:
            client.post(
                "/expenses",
                json={"amount": amount, "category": category, "expense_date": f"{when}T00:00:00"},
                headers=auth,
            )

        resp = client.get(
            "/budgets/status",
            params={"startDate": "2024-01-01", "endDate": "2024-12-31", "category": "Food"},
            headers=auth,
        )
        body = resp.json()
        [line] = body["budget_summary"]
        assert Decimal(line["spent_amount"]) == Decimal("50")
        assert Decimal(line["remaining_amount"]) == Decimal("150")
        assert line["is_exceeded"] is False
        assert body["filter_category"] == "Food"
        assert body["budgets_count"] == 1


class TestDateOnlyBounds:

    def test_date_only_end_covers_the_last_day(self, client, auth):
        resp = client.post(
            "/budgets",
            json={"category": "Food", "amount": 200, "start_date": "2024-01-01", "end_date": "2024-01-31"},
            headers=auth,
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["start_date"].startswith("2024-01-01T00:00:00")
        assert resp.json()["end_date"].startswith("2024-01-31T23:59:59.999")

        client.post(
            "/expenses",
            json={"amount": 40, "category": "Food", "expense_date": "2024-01-31T12:00:00"},
            headers=auth,
        )
        body = client.get(
            "/reports/budget-adherence",
            params={"startDate": "2024-01-01", "endDate": "2024-12-31"},
            headers=auth,
        ).json()
        [line] = body["budget_summary"]
        assert Decimal(line["spent_amount"]) == Decimal("40")

    def test_explicit_time_is_kept(self, client, auth):
        budget = create_budget(client, auth, start="2024-01-01", end="2024-01-31")
        assert budget["end_date"].startswith("2024-01-31T00:00:00")

    def test_date_only_end_on_update(self, client, auth):
        budget = create_budget(client, auth, start="2024-01-01", end="2024-01-15")
        resp = client.patch(f"/budgets/{budget['id']}", json={"end_date": "2024-01-31"}, headers=auth)
        assert resp.status_code == 200
        assert resp.json()["end_date"].startswith("2024-01-31T23:59:59.999")

    def test_adjacent_date_only_months_do_not_conflict(self, client, auth):
        for start, end in [("2024-01-01", "2024-01-31"), ("2024-02-01", "2024-02-29")]:
            resp = client.post(
                "/budgets",
                json={"category": "Food", "amount": 100, "start_date": start, "end_date": end},
                headers=auth,
            )
            assert resp.status_code == 201, resp.text

    def test_impossible_date_is_rejected(self, client, auth):
        resp = client.post(
            "/budgets",
            json={"category": "Food", "amount": 100, "start_date": "2024-02-01", "end_date": "2024-02-30"},
            headers=auth,
        )
        assert resp.status_code == 422
