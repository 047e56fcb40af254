"""
Ledger API Tests

Accounts, incomes, expenses, tags and dashboard endpoints: status codes,
field-error payloads, redirects and balances as seen over HTTP.
"""
from datetime import timedelta
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from backend.test_scripts.test_db_config import setup_test_database, create_test_schema

setup_test_database()

from backend.app.config import get_settings
from backend.app.main import app
from backend.app.utils.datetime_utils import today_date
from backend.test_scripts.test_utils import unique_name

API = get_settings().API_V1_PREFIX
PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="module", autouse=True)
def schema():
    create_test_schema()


async def _logged_in_client() -> httpx.AsyncClient:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    username = unique_name("api")
    response = await client.post(
        f"{API}/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
        )
    assert response.status_code == 201, response.text
    response = await client.post(f"{API}/auth/login", json={"username": username, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return client


@pytest_asyncio.fixture
async def client():
    client = await _logged_in_client()
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def other_client():
    client = await _logged_in_client()
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def anonymous():
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def open_account(client, name="Checking", initial_balance="100") -> dict:
    response = await client.post(f"{API}/accounts", json={"name": name, "initial_balance": initial_balance})
    assert response.status_code == 201, response.text
    return response.json()


def expense_body(account_id: int, amount="30", tags=None, title="Groceries", day=None) -> dict:
    return {
        "title": title,
        "amount": amount,
        "date": (day or today_date()).isoformat(),
        "account_id": account_id,
        "tags": tags if tags is not None else [],
        }


# ============================================================================
# ACCOUNTS
# ============================================================================

class TestAccountsApi:

    @pytest.mark.asyncio
    async def test_open_and_list(self, client):
        created = await open_account(client, name="Wallet", initial_balance="25.5")

        assert Decimal(created["balance"]) == Decimal("25.5")

        response = await client.get(f"{API}/accounts")
        assert response.status_code == 200
        assert [a["name"] for a in response.json()] == ["Wallet"]

    @pytest.mark.asyncio
    async def test_negative_initial_balance(self, client):
        response = await client.post(f"{API}/accounts", json={"name": "Broke", "initial_balance": "-1"})

        assert response.status_code == 422
        assert response.json()["field_errors"] == {"initial_balance": ["Balance must be positive"]}

    @pytest.mark.asyncio
    async def test_balance_check(self, client):
        account = await open_account(client)
        await client.post(f"{API}/expenses", json=expense_body(account["id"], "30"))

        response = await client.get(f"{API}/accounts/{account['id']}/balance-check")

        assert response.status_code == 200
        data = response.json()
        assert data["consistent"] is True
        assert Decimal(data["computed_balance"]) == Decimal("70")


# ============================================================================
# EXPENSES
# ============================================================================

class TestExpensesApi:

    @pytest.mark.asyncio
    async def test_create_and_edit_expense(self, client):
        account = await open_account(client)

        response = await client.post(f"{API}/expenses", json=expense_body(account["id"], "30", tags="Food"))
        assert response.status_code == 201, response.text
        created = response.json()
        assert Decimal(created["account_balance"]) == Decimal("70")

        response = await client.put(f"{API}/expenses/{created['id']}", json=expense_body(account["id"], "50", tags=["Food"]))
        assert response.status_code == 200, response.text
        assert Decimal(response.json()["adjusted_accounts"][str(account["id"])]) == Decimal("50")

        accounts = (await client.get(f"{API}/accounts")).json()
        assert Decimal(accounts[0]["balance"]) == Decimal("50")

    @pytest.mark.asyncio
    async def test_move_expense_between_accounts(self, client):
        a1 = await open_account(client, name="A1", initial_balance="140")
        a2 = await open_account(client, name="A2", initial_balance="200")
        created = (await client.post(f"{API}/expenses", json=expense_body(a1["id"], "40"))).json()

        response = await client.put(f"{API}/expenses/{created['id']}", json=expense_body(a2["id"], "25"))

        assert response.status_code == 200
        balances = {a["name"]: Decimal(a["balance"]) for a in (await client.get(f"{API}/accounts")).json()}
        assert balances == {"A1": Decimal("140"), "A2": Decimal("175")}

    @pytest.mark.asyncio
    async def test_field_errors(self, client):
        account = await open_account(client)
        body = expense_body(account["id"], amount="-5", title="  ")
        body["date"] = "not-a-date"

        response = await client.post(f"{API}/expenses", json=body)

        assert response.status_code == 422
        data = response.json()
        assert data["form_errors"] == []
        assert data["field_errors"]["title"] == ["Title is required"]
        assert data["field_errors"]["amount"] == ["Amount should be greater than 0"]
        assert data["field_errors"]["date"] == ["Invalid date"]

    @pytest.mark.asyncio
    async def test_oversized_amount_is_field_error(self, client):
        account = await open_account(client)

        response = await client.post(f"{API}/expenses", json=expense_body(account["id"], amount="1e30"))

        assert response.status_code == 422
        assert response.json()["field_errors"] == {"amount": ["Amount is too large"]}
        assert (await client.get(f"{API}/expenses")).json() == []
        accounts = (await client.get(f"{API}/accounts")).json()
        assert Decimal(accounts[0]["balance"]) == Decimal("100")

    @pytest.mark.asyncio
    async def test_foreign_account_is_field_error(self, client, other_client):
        foreign = await open_account(other_client)

        response = await client.post(f"{API}/expenses", json=expense_body(foreign["id"]))

        assert response.status_code == 422
        assert response.json()["field_errors"] == {"account_id": ["Account not found"]}

    @pytest.mark.asyncio
    async def test_editor_and_listing(self, client):
        account = await open_account(client, name="Card")
        created = (await client.post(f"{API}/expenses", json=expense_body(account["id"], "12", tags="Travel, Food"))).json()

        editor = await client.get(f"{API}/expenses/{created['id']}")
        assert editor.status_code == 200
        data = editor.json()
        assert [t["name"] for t in data["expense"]["tags"]] == ["Food", "Travel"]
        assert data["tag_names"] == ["Food", "Travel"]
        assert data["accounts"] == [{"id": account["id"], "name": "Card"}]

        listing = await client.get(f"{API}/expenses", params={"account_id": account["id"], "period": "last-7-days"})
        assert listing.status_code == 200
        assert [e["id"] for e in listing.json()] == [created["id"]]
        assert listing.json()[0]["account_name"] == "Card"

    @pytest.mark.asyncio
    async def test_listing_excludes_eight_days_ago(self, client):
        account = await open_account(client)
        old_day = today_date() - timedelta(days=8)
        await client.post(f"{API}/expenses", json=expense_body(account["id"], "1", day=old_day))

        listing = await client.get(f"{API}/expenses", params={"period": "last-7-days"})
        everything = await client.get(f"{API}/expenses")

        assert listing.json() == []
        assert len(everything.json()) == 1

    @pytest.mark.asyncio
    async def test_unknown_period_rejected(self, client):
        response = await client.get(f"{API}/expenses", params={"period": "fortnight"})

        assert response.status_code == 422
        assert "period" in response.json()["field_errors"]

    @pytest.mark.asyncio
    async def test_hidden_expense_redirects_to_listing(self, client, other_client):
        foreign_account = await open_account(other_client)
        foreign = (await other_client.post(f"{API}/expenses", json=expense_body(foreign_account["id"]))).json()
        mine = await open_account(client)

        editor = await client.get(f"{API}/expenses/{foreign['id']}")
        edit = await client.put(f"{API}/expenses/{foreign['id']}", json=expense_body(mine["id"]))

        for response in (editor, edit):
            assert response.status_code == 303
            assert response.headers["location"] == f"{API}/expenses"

        balances = (await other_client.get(f"{API}/accounts")).json()
        assert Decimal(balances[0]["balance"]) == Decimal("70")


# ============================================================================
# INCOMES / TAGS / DASHBOARD
# ============================================================================

class TestIncomeTagsDashboard:

    @pytest.mark.asyncio
    async def test_income_credits_account(self, client):
        account = await open_account(client, initial_balance="0")
        body = {"title": "Salary", "amount": 1200, "date": today_date().isoformat(), "account_id": account["id"]}

        response = await client.post(f"{API}/incomes", json=body)

        assert response.status_code == 201, response.text
        assert Decimal(response.json()["account_balance"]) == Decimal("1200")

        incomes = (await client.get(f"{API}/incomes", params={"period": "today"})).json()
        assert [i["title"] for i in incomes] == ["Salary"]

    @pytest.mark.asyncio
    async def test_tags_listing(self, client):
        account = await open_account(client)
        await client.post(f"{API}/expenses", json=expense_body(account["id"], "1", tags=["Rent", "Bills", "Rent"]))

        response = await client.get(f"{API}/tags")

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["Bills", "Rent"]

    @pytest.mark.asyncio
    async def test_dashboard(self, client):
        a1 = await open_account(client, name="A1", initial_balance="0")
        a2 = await open_account(client, name="A2", initial_balance="0")
        await client.post(f"{API}/expenses", json=expense_body(a1["id"], "10"))
        await client.post(f"{API}/expenses", json=expense_body(a2["id"], "5"))

        response = await client.get(
            f"{API}/dashboard",
            params={"expense_account_id": a1["id"], "expense_period": "this-month", "income_period": "all"},
            )

        assert response.status_code == 200
        data = response.json()
        assert [Decimal(p["amount"]) for p in data["expenses"]["points"]] == [Decimal("10")]
        assert data["incomes"]["points"] == []
        assert data["expenses"]["filters"] == {"account_id": a1["id"], "period": "this-month"}


# ============================================================================
# AUTH
# ============================================================================

@pytest.mark.asyncio
async def test_endpoints_require_login(anonymous):
    for method, path in [
        ("GET", "/accounts"),
        ("POST", "/accounts"),
        ("GET", "/expenses"),
        ("POST", "/expenses"),
        ("PUT", "/expenses/1"),
        ("GET", "/incomes"),
        ("POST", "/incomes"),
        ("GET", "/tags"),
        ("GET", "/dashboard"),
        ]:
        response = await anonymous.request(method, f"{API}{path}", json={})
        assert response.status_code == 401, f"{method} {path}: {response.status_code}"
