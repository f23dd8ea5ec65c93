from datetime import date
from decimal import Decimal

from dividend_calendar.company import NEW_TAG, Company
from dividend_calendar.company_registry import CompanyRegistry
from dividend_calendar.pages.detail_page import Enrichment


def make_company(full_name="Acme Corp", dividend_date=date(2025, 3, 20), price=0.0, tags=None):
    return Company(
        name=full_name.split()[0].upper(),
        full_name=full_name,
        sector="",
        ex_dividend_date=date(2025, 3, 1),
        dividend_date=dividend_date,
        detail_link=f"/markets/{full_name.lower()}",
        dividend_per_share=0.3,
        price=price,
        tags=set(tags or {NEW_TAG}),
    )


def test_apply_enrichment_updates_registered_company():
    company = make_company()
    registry = CompanyRegistry()
    registry.put(company)

    applied = registry.apply_enrichment("Acme Corp", company, Enrichment(10.0, Decimal("5E9")))

    assert applied is True
    assert registry.get("Acme Corp").price == 10.0
    assert registry.get("Acme Corp").market_cap == 5_000_000_000


def test_failed_result_never_downgrades_existing_price():
    company = make_company(price=12.5)
    company.market_cap = Decimal(100)
    registry = CompanyRegistry({"Acme Corp": company})

    applied = registry.apply_enrichment("Acme Corp", company, Enrichment.failed())

    assert applied is False
    assert company.price == 12.5
    assert company.market_cap == 100


def test_result_for_replaced_or_removed_entry_is_dropped():
    old = make_company()
    registry = CompanyRegistry({"Acme Corp": old})
    registry.put(make_company())

    assert registry.apply_enrichment("Acme Corp", old, Enrichment(1.0, Decimal(1))) is False
    assert registry.get("Acme Corp").price == 0

    assert registry.apply_enrichment("Gone Inc", make_company("Gone Inc"), Enrichment(1.0, Decimal(1))) is False
    assert "Gone Inc" not in registry


def test_remove_expired_drops_only_past_dividend_dates():
    registry = CompanyRegistry()
    registry.put(make_company("Old Co", dividend_date=date(2025, 3, 19)))
    registry.put(make_company("Today Co", dividend_date=date(2025, 3, 20)))
    registry.put(make_company("Later Co", dividend_date=date(2025, 4, 1)))

    removed = registry.remove_expired(date(2025, 3, 20))

    assert removed == ["Old Co"]
    assert registry.keys() == ["Today Co", "Later Co"]


def test_discard_tag_keeps_other_tags():
    registry = CompanyRegistry({"Acme Corp": make_company(tags={NEW_TAG, "FAVOURITE"})})

    registry.discard_tag("Acme Corp", NEW_TAG)
    registry.discard_tag("Missing", NEW_TAG)

    assert registry.get("Acme Corp").tags == {"FAVOURITE"}


def test_snapshot_is_independent_copy():
    company = make_company()
    registry = CompanyRegistry({"Acme Corp": company})

    snap = registry.snapshot()
    company.tags.add("FAVOURITE")
    company.price = 3.0

    assert snap["Acme Corp"].tags == {NEW_TAG}
    assert snap["Acme Corp"].price == 0
    assert list(snap) == ["Acme Corp"]
