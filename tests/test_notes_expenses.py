"""Tests for note, expense and expense category endpoints."""

from decimal import Decimal

from src.models import Expense, ExpenseCategory

NOTES_URL = "/api/v1/notes"
EXPENSES_URL = "/api/v1/expenses"
CATEGORIES_URL = "/api/v1/categories"


def other_user_headers(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "other@example.com", "password": "otherpass123"},
    )
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def create_note(client, headers, title="Groceries", content=None):
    response = client.post(NOTES_URL, headers=headers, json={"title": title, "content": content})
    assert response.status_code == 201
    return response.json()


def create_expense(client, headers, category="Food", amount="12.50", **extra):
    response = client.post(
        EXPENSES_URL,
        headers=headers,
        json={"category": category, "amount": amount, **extra},
    )
    assert response.status_code == 201
    return response.json()


class TestNotes:
    """Tests for /notes."""

    def test_create_and_get(self, client, auth_headers):
        created = create_note(client, auth_headers, "  Groceries  ", "Milk, eggs")

        response = client.get(f"{NOTES_URL}/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Groceries"
        assert data["content"] == "Milk, eggs"
        assert data["user_id"] == auth_headers.user_id

    def test_blank_title(self, client, auth_headers):
        response = client.post(NOTES_URL, headers=auth_headers, json={"title": "   "})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "title"

    def test_search_title_and_content(self, client, auth_headers):
        create_note(client, auth_headers, "Groceries", "Milk, eggs")
        create_note(client, auth_headers, "Ideas", "Buy more milk")
        create_note(client, auth_headers, "Books", "Dune")

        response = client.get(NOTES_URL, headers=auth_headers, params={"q": "milk"})

        assert sorted(note["title"] for note in response.json()) == ["Groceries", "Ideas"]

    def test_pagination(self, client, auth_headers):
        for title in ("One", "Two", "Three"):
            create_note(client, auth_headers, title)

        page = client.get(NOTES_URL, headers=auth_headers, params={"limit": 2, "offset": 1})

        assert len(page.json()) == 2

    def test_limit_is_capped(self, client, auth_headers):
        response = client.get(NOTES_URL, headers=auth_headers, params={"limit": 500})

        assert response.status_code == 400

    def test_update_clears_content(self, client, auth_headers):
        created = create_note(client, auth_headers, "Draft", "text")

        response = client.patch(
            f"{NOTES_URL}/{created['id']}", headers=auth_headers, json={"content": None}
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Draft"
        assert response.json()["content"] is None

    def test_delete(self, client, auth_headers):
        created = create_note(client, auth_headers)
        url = f"{NOTES_URL}/{created['id']}"

        assert client.delete(url, headers=auth_headers).json() == {"message": "Note deleted"}
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_other_users_note_is_not_found(self, client, auth_headers):
        created = create_note(client, auth_headers)

        response = client.get(f"{NOTES_URL}/{created['id']}", headers=other_user_headers(client))

        assert response.status_code == 404


class TestExpenses:
    """Tests for /expenses."""

    def test_create_makes_category(self, client, auth_headers, db):
        data = create_expense(client, auth_headers, "Food", "12.50", description="Lunch")

        assert data["category"] == "Food"
        assert Decimal(str(data["amount"])) == Decimal("12.50")
        assert data["description"] == "Lunch"
        assert db.query(ExpenseCategory).count() == 1

    def test_create_reuses_category(self, client, auth_headers, db):
        create_expense(client, auth_headers, "Food")
        create_expense(client, auth_headers, " Food ")

        assert db.query(ExpenseCategory).count() == 1
        assert db.query(Expense).count() == 2

    def test_amount_must_be_positive(self, client, auth_headers):
        response = client.post(
            EXPENSES_URL, headers=auth_headers, json={"category": "Food", "amount": 0}
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "amount"

    def test_list_newest_first_with_filters(self, client, auth_headers):
        create_expense(client, auth_headers, "Food", "5", date="2026-03-01T12:00:00Z")
        create_expense(client, auth_headers, "Rent", "900", date="2026-03-02T12:00:00Z")
        create_expense(client, auth_headers, "Food", "7", date="2026-03-05T12:00:00Z")

        everything = client.get(EXPENSES_URL, headers=auth_headers).json()
        food = client.get(EXPENSES_URL, headers=auth_headers, params={"category": "Food"}).json()
        early = client.get(
            EXPENSES_URL,
            headers=auth_headers,
            params={"end_date": "2026-03-02T23:59:59Z"},
        ).json()

        assert [Decimal(str(e["amount"])) for e in everything] == [
            Decimal("7"),
            Decimal("900"),
            Decimal("5"),
        ]
        assert {e["category"] for e in food} == {"Food"}
        assert len(food) == 2
        assert sorted(e["category"] for e in early) == ["Food", "Rent"]

    def test_delete(self, client, auth_headers):
        created = create_expense(client, auth_headers)
        url = f"{EXPENSES_URL}/{created['id']}"

        assert client.delete(url, headers=auth_headers).status_code == 200
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_other_users_expense_is_not_found(self, client, auth_headers):
        created = create_expense(client, auth_headers)

        response = client.delete(
            f"{EXPENSES_URL}/{created['id']}", headers=other_user_headers(client)
        )

        assert response.status_code == 404


class TestCategories:
    """Tests for /categories."""

    def test_create_and_list_by_name(self, client, auth_headers):
        for name in ("Travel", "Food"):
            assert (
                client.post(CATEGORIES_URL, headers=auth_headers, json={"name": name}).status_code
                == 201
            )

        response = client.get(CATEGORIES_URL, headers=auth_headers)

        assert [category["name"] for category in response.json()] == ["Food", "Travel"]

    def test_duplicate_name(self, client, auth_headers):
        client.post(CATEGORIES_URL, headers=auth_headers, json={"name": "Food"})

        response = client.post(CATEGORIES_URL, headers=auth_headers, json={"name": "Food"})

        assert response.status_code == 400
        assert response.json()["error"] == "Category already exists"

    def test_rename(self, client, auth_headers):
        created = client.post(CATEGORIES_URL, headers=auth_headers, json={"name": "Food"}).json()

        response = client.patch(
            f"{CATEGORIES_URL}/{created['id']}", headers=auth_headers, json={"name": "Groceries"}
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Groceries"

    def test_delete_keeps_expenses(self, client, auth_headers, db):
        expense = create_expense(client, auth_headers, "Food")

        response = client.delete(
            f"{CATEGORIES_URL}/{expense['category_id']}", headers=auth_headers
        )

        assert response.status_code == 200
        kept = client.get(f"{EXPENSES_URL}/{expense['id']}", headers=auth_headers).json()
        assert kept["category_id"] is None
        assert kept["category"] is None

    def test_usage(self, client, auth_headers):
        create_expense(client, auth_headers, "Food", "10.25")
        create_expense(client, auth_headers, "Food", "4.75")
        client.post(CATEGORIES_URL, headers=auth_headers, json={"name": "Unused"})

        response = client.get(f"{CATEGORIES_URL}/usage", headers=auth_headers)

        assert response.status_code == 200
        usage = response.json()
        assert [row["name"] for row in usage] == ["Food", "Unused"]
        assert usage[0]["expense_count"] == 2
        assert Decimal(str(usage[0]["total_amount"])) == Decimal("15.00")
        assert usage[1]["expense_count"] == 0
        assert Decimal(str(usage[1]["total_amount"])) == Decimal("0")
