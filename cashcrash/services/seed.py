"""Demo market data loaded into an empty store at startup."""

from __future__ import annotations

from decimal import Decimal

from cashcrash.core.logging import get_logger
from cashcrash.repositories.storage import Storage


logger = get_logger("services.seed")


def _logo(photo: str) -> str:
    return (
        f"https://images.unsplash.com/photo-{photo}"
        "?ixlib=rb-4.0.3&auto=format&fit=crop&w=64&h=64"
    )


DEMO_COMPANIES = [
    {
        "name": "Apple Inc.",
        "symbol": "AAPL",
        "price": "170.00",
        "sell_price": "162.00",
        "dividend": "2.1",
        "description": "Technology company specializing in consumer electronics and software",
        "logo_url": _logo("1611532736597-de2d4265fba3"),
    },
    {
        "name": "Microsoft Corp.",
        "symbol": "MSFT",
        "price": "340.00",
        "sell_price": "325.00",
        "dividend": "1.8",
        "description": "Technology corporation developing software and cloud services",
        "logo_url": _logo("1486406146926-c627a92ad1ab"),
    },
    {
        "name": "Tesla Inc.",
        "symbol": "TSLA",
        "price": "240.00",
        "sell_price": "230.00",
        "dividend": "0",
        "description": "Electric vehicle and clean energy company",
        "logo_url": _logo("1560958089-b8a1929cea89"),
    },
    {
        "name": "Amazon Inc.",
        "symbol": "AMZN",
        "price": "3420.50",
        "sell_price": "3280.00",
        "dividend": "1.2",
        "description": "E-commerce and cloud computing leader with global reach",
        "logo_url": _logo("1586880244386-8b3e34c8382c"),
    },
    {
        "name": "Alphabet Inc.",
        "symbol": "GOOGL",
        "price": "2750.25",
        "sell_price": "2640.00",
        "dividend": "0",
        "description": "Search engine and advertising technology company",
        "logo_url": _logo("1497366216548-37526070297c"),
    },
    {
        "name": "Netflix Inc.",
        "symbol": "NFLX",
        "price": "485.75",
        "sell_price": "465.00",
        "dividend": "0",
        "description": "Global streaming entertainment platform and content creator",
        "logo_url": _logo("1574375927938-d5a98e8ffe85"),
    },
    {
        "name": "Nike Inc.",
        "symbol": "NKE",
        "price": "128.40",
        "sell_price": "123.00",
        "dividend": "1.1",
        "description": "Global athletic footwear and apparel brand",
        "logo_url": _logo("1542291026-7eec264c27ff"),
    },
    {
        "name": "Coca-Cola Co.",
        "symbol": "KO",
        "price": "58.90",
        "sell_price": "56.50",
        "dividend": "3.2",
        "description": "Global beverage corporation and brand",
        "logo_url": _logo("1561758033-d89a9ad46330"),
    },
]

# Rates are quoted in Turkish lira
DEMO_CURRENCIES = [
    {"name": "ABD Doları", "code": "USD", "rate": "34.20", "sell_rate": "32.80",
     "logo_url": _logo("1579621970563-ebec7560ff3e")},
    {"name": "Euro", "code": "EUR", "rate": "37.40", "sell_rate": "35.60",
     "logo_url": _logo("1526304640581-d334cdbbf45e")},
    {"name": "İngiliz Sterlini", "code": "GBP", "rate": "42.80", "sell_rate": "40.20",
     "logo_url": _logo("1513475382585-d06e58bcb0e0")},
    {"name": "Japon Yeni", "code": "JPY", "rate": "0.24", "sell_rate": "0.22",
     "logo_url": _logo("1540959733332-eab4deabeeaf")},
    {"name": "Kanada Doları", "code": "CAD", "rate": "25.40", "sell_rate": "23.80",
     "logo_url": _logo("1578662996442-48f60103fc96")},
]

DEMO_ACCESS_CODES = [
    "123456",
    "2345678",
    "8982972",
    "00998988",
    "18298139",
    "kursoyvseyupb",
    "biznizzyineasik",
    "borsacoktu11",
    "krizegirdik777",
    "borsissarabeni",
    "krizpygergin",
    "kriziscoming",
    "girisimciolucaz",
    "paraparanoya",
    "sansdonermi0",
    "altinavcisi5",
    "borsabebesi9",
    "bitcoinlover4",
    "krizyonetimi0",
    "enflasyon%200",
    "riskbudur111",
    "cashmicrashmi",
    "kursoylapiyasa",
    "biznizzisbuldu",
    "elonmuskolcaz",
    "parababası55",
    "kursoyyksde1",
    "burjuvapanelle",
    "biznizzpozitif6",
    "borsisssayısalcı",
]

DEMO_TEAMS = [
    {"name": f"{number}. Takım", "access_code": code}
    for number, code in enumerate(DEMO_ACCESS_CODES, start=1)
] + [
    {"name": "Yedek Takım 1", "access_code": "yedek1"},
    {"name": "Yedek Takım 2", "access_code": "yedek2"},
]

DEMO_CASH_BALANCE = Decimal("100000.00")


async def seed_demo_data(storage: Storage) -> bool:
    """Load the demo market when the store is empty. Returns True if seeded."""
    if not await storage.is_empty():
        logger.debug("Storage already populated, skipping demo data")
        return False

    for company in DEMO_COMPANIES:
        await storage.create_company(
            name=company["name"],
            symbol=company["symbol"],
            price=Decimal(company["price"]),
            sell_price=Decimal(company["sell_price"]),
            dividend=Decimal(company["dividend"]),
            description=company["description"],
            logo_url=company["logo_url"],
        )

    for currency in DEMO_CURRENCIES:
        await storage.create_currency(
            name=currency["name"],
            code=currency["code"],
            rate=Decimal(currency["rate"]),
            sell_rate=Decimal(currency["sell_rate"]),
            logo_url=currency["logo_url"],
        )

    for team in DEMO_TEAMS:
        await storage.create_team(
            name=team["name"],
            access_code=team["access_code"],
            cash_balance=DEMO_CASH_BALANCE,
        )

    logger.info(
        f"Seeded {len(DEMO_COMPANIES)} companies, {len(DEMO_CURRENCIES)} currencies "
        f"and {len(DEMO_TEAMS)} teams"
    )
    return True
