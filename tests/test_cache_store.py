import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from dividend_calendar.cache_store import CacheLoadError, CacheStore
from dividend_calendar.company import FAVOURITE_TAG, NEW_TAG, Company, parse_market_cap


def make_company(full_name, price=0.0, market_cap=Decimal(0), tags=None):
    return Company(
        name=full_name.upper(),
        full_name=full_name,
        sector="Utilities",
        ex_dividend_date=date(2025, 3, 5),
        dividend_date=date(2025, 3, 20),
        detail_link=f"/markets/{full_name}",
        dividend_per_share=1.25,
        price=price,
        market_cap=market_cap,
        tags=set(tags or ()),
    )


def test_save_then_load_preserves_order_and_values(tmp_path: Path):
    store = CacheStore(tmp_path / "companies.json")
    companies = {
        "zeta": make_company("zeta", price=9.5, market_cap=Decimal("2500000000"), tags={NEW_TAG}),
        "alpha": make_company("alpha", tags={FAVOURITE_TAG}),
    }

    assert store.save(companies) is True
    loaded = store.load()

    assert list(loaded) == ["zeta", "alpha"]
    assert loaded == companies


def test_saved_file_uses_cache_schema(tmp_path: Path):
    path = tmp_path / "companies.json"
    CacheStore(path).save({"acme": make_company("acme", market_cap=Decimal("1.5"))})

    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["acme"]["exDividendDate"] == "05 Mar 2025"
    assert data["acme"]["dividendDate"] == "20 Mar 2025"
    assert data["acme"]["marketCap"] == "1.5"
    assert data["acme"]["tags"] == []
    assert not list(tmp_path.glob("*.tmp"))


def test_load_missing_file_raises(tmp_path: Path):
    with pytest.raises(CacheLoadError):
        CacheStore(tmp_path / "nope.json").load()


@pytest.mark.parametrize("content", ["{not json", "[]", '{"acme": {"name": "x"}}'])
def test_load_invalid_content_raises(tmp_path: Path, content):
    path = tmp_path / "companies.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(CacheLoadError):
        CacheStore(path).load()


def test_save_failure_returns_false(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    # diretório-pai é um arquivo: não dá para gravar
    store = CacheStore(blocker / "companies.json")

    assert store.save({"acme": make_company("acme")}) is False


def test_market_cap_round_trip_is_exact(tmp_path: Path):
    store = CacheStore(tmp_path / "companies.json")
    market_cap = parse_market_cap("1.23456789012345678M")

    store.save({"acme": make_company("acme", price=9.5, market_cap=market_cap)})
    loaded = store.load()["acme"].market_cap

    assert loaded == market_cap
    assert loaded == Decimal("1234567.89012345678")
    assert json.loads(store.path.read_text(encoding="utf-8"))["acme"]["marketCap"] == "1234567.89012345678000000"


def test_load_accepts_numeric_market_cap_from_older_caches(tmp_path: Path):
    path = tmp_path / "companies.json"
    entry = make_company("acme").to_dict()
    entry["marketCap"] = 2500000000.5
    path.write_text(json.dumps({"acme": entry}), encoding="utf-8")

    assert CacheStore(path).load()["acme"].market_cap == Decimal("2500000000.5")
