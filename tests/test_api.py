"""
Tests for the HTTP API

- /v1/deposits (record, list, summary, preview, notes, delete)
- /v1/withdrawals
- /v1/benchmark
- /v1/benchmark/comparison (default and what-if)
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient

from conftest import TEST_USER


async def _seed(client: AsyncClient):
    for amount, day in ((5000, "2024-01-01"), (5000, "2024-06-01")):
        resp = await client.post(
            f"/v1/deposits?user={TEST_USER}", json={"amount": amount, "date": day}
        )
        assert resp.status_code == 201


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.anyio
async def test_record_deposit(client: AsyncClient):
    resp = await client.post(
        f"/v1/deposits?user={TEST_USER}",
        json={"amount": 4500, "date": "2024-01-01", "notes": "first"},
    )
    assert resp.status_code == 201

    data = resp.json()
    assert data["type"] == "DEPOSIT"
    assert Decimal(data["amount"]) == Decimal("4500")
    assert Decimal(data["benchmark_price"]) == Decimal("450")
    assert Decimal(data["benchmark_shares"]) == Decimal("10")
    assert data["notes"] == "first"
    assert "id" in data


@pytest.mark.anyio
async def test_record_deposit_rejects_non_positive_amount(client: AsyncClient):
    resp = await client.post(f"/v1/deposits?user={TEST_USER}", json={"amount": 0, "date": "2024-01-01"})
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_record_deposit_without_price_is_unavailable(client: AsyncClient):
    resp = await client.post(f"/v1/deposits?user={TEST_USER}", json={"amount": 100, "date": "2019-01-01"})
    assert resp.status_code == 503
    assert resp.json()["error"] == "PriceUnavailableError"


@pytest.mark.anyio
async def test_withdrawal_and_listing(client: AsyncClient):
    await _seed(client)
    resp = await client.post(f"/v1/withdrawals?user={TEST_USER}", json={"amount": 1000, "date": "2024-06-01"})
    assert resp.status_code == 201
    assert Decimal(resp.json()["amount"]) == Decimal("-1000")

    resp = await client.get(f"/v1/deposits?user={TEST_USER}")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["deposits"]) == 3
    assert data["summary"]["deposit_count"] == 2
    assert data["summary"]["withdrawal_count"] == 1
    assert Decimal(data["summary"]["net_invested"]) == Decimal("9000")

    resp = await client.get(f"/v1/deposits?user={TEST_USER}&type=WITHDRAWAL")
    assert [d["type"] for d in resp.json()["deposits"]] == ["WITHDRAWAL"]


@pytest.mark.anyio
async def test_listing_page_and_summary_share_one_read(client: AsyncClient, ledger, monkeypatch):
    await _seed(client)
    reads = []
    original = ledger.get_deposits

    async def counting_get_deposits(*args, **kwargs):
        reads.append(args)
        return await original(*args, **kwargs)

    monkeypatch.setattr(ledger, "get_deposits", counting_get_deposits)

    resp = await client.get(f"/v1/deposits?user={TEST_USER}&limit=1&offset=1")
    assert resp.status_code == 200
    data = resp.json()
    assert [d["date"] for d in data["deposits"]] == ["2024-01-01"]
    assert data["summary"]["deposit_count"] == 2
    assert Decimal(data["summary"]["net_invested"]) == Decimal("10000")
    assert len(reads) == 1


@pytest.mark.anyio
async def test_withdrawal_over_capital_rejected(client: AsyncClient):
    await _seed(client)
    resp = await client.post(f"/v1/withdrawals?user={TEST_USER}", json={"amount": 20000, "date": "2024-06-01"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "WithdrawalExceedsCapitalError"


@pytest.mark.anyio
async def test_summary_and_preview(client: AsyncClient):
    await _seed(client)
    resp = await client.get(f"/v1/deposits/summary?user={TEST_USER}")
    assert resp.status_code == 200
    summary = resp.json()
    assert Decimal(summary["net_invested"]) == Decimal("10000")
    assert summary["first_deposit_date"] == "2024-01-01"
    assert summary["last_deposit_date"] == "2024-06-01"

    resp = await client.get("/v1/deposits/preview?amount=900&date=2024-01-02")
    assert resp.status_code == 200
    preview = resp.json()
    assert Decimal(preview["benchmark_shares"]) == Decimal("2")
    assert preview["price_date"] == "2024-01-01"


@pytest.mark.anyio
async def test_update_notes_and_delete(client: AsyncClient):
    resp = await client.post(f"/v1/deposits?user={TEST_USER}", json={"amount": 100, "date": "2024-01-01"})
    deposit_id = resp.json()["id"]

    resp = await client.patch(f"/v1/deposits/{deposit_id}?user={TEST_USER}", json={"notes": "edited"})
    assert resp.status_code == 200
    assert resp.json()["notes"] == "edited"

    resp = await client.delete(f"/v1/deposits/{deposit_id}?user={TEST_USER}")
    assert resp.status_code == 204

    resp = await client.delete(f"/v1/deposits/{deposit_id}?user={TEST_USER}")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_comparison_default_mode(client: AsyncClient):
    await _seed(client)
    resp = await client.get(f"/v1/benchmark/comparison?user={TEST_USER}")
    assert resp.status_code == 200

    data = resp.json()
    assert data["winner"] == "LUMP_SUM"
    assert data["mode"] == "DEFAULT"
    assert data["lump_sum_date"] == "2024-01-01"
    assert round(Decimal(data["dca_current_value"]), 2) == Decimal("11611.11")
    assert round(Decimal(data["lump_sum_current_value"]), 2) == Decimal("12222.22")
    assert round(Decimal(data["timing_benefit"]), 2) == Decimal("-611.11")
    assert len(data["data_points"]) == 3


@pytest.mark.anyio
async def test_comparison_what_if(client: AsyncClient):
    await _seed(client)
    resp = await client.get(
        f"/v1/benchmark/comparison?user={TEST_USER}&lumpSumDate=2023-12-01&lumpSumPrice=600"
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"] == "WHAT_IF"
    assert Decimal(data["lump_sum_price"]) == Decimal("600")
    assert data["winner"] == "DCA"

    resp = await client.get(f"/v1/benchmark/comparison?user={TEST_USER}&lumpSumDate=2023-12-01")
    assert resp.status_code == 200
    assert Decimal(resp.json()["lump_sum_price"]) == Decimal("400")


@pytest.mark.anyio
async def test_comparison_errors(client: AsyncClient):
    resp = await client.get(f"/v1/benchmark/comparison?user={TEST_USER}")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NoDepositsError"

    await _seed(client)
    resp = await client.get(
        f"/v1/benchmark/comparison?user={TEST_USER}&lumpSumDate=2023-12-01&lumpSumPrice=0"
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidPriceError"

    resp = await client.get(f"/v1/benchmark/comparison?user={TEST_USER}&lumpSumPrice=400")
    assert resp.status_code == 422


@pytest.mark.anyio
async def test_benchmark_metrics(client: AsyncClient):
    await _seed(client)
    resp = await client.get(f"/v1/benchmark?user={TEST_USER}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["ticker"] == "SPY"
    assert Decimal(data["initial_capital"]) == Decimal("10000")
    assert data["setup_date"] == "2024-01-01"
    assert data["return_percent"] > 0
