import pytest

from package_pricing import DateContext, GuestCounts, PackagePriceEngine


@pytest.fixture
def engine():
    return PackagePriceEngine()


@pytest.fixture
def family():
    return GuestCounts(adults=2, children=1, infants=1)


@pytest.fixture
def three_nights():
    return DateContext.range("2025-07-10", "2025-07-13")


@pytest.fixture
def all_tours():
    return [
        {"id": 5, "name": "City Tour", "price": 10000},
        {"id": 9, "name": "Desert Safari", "price": 5000},
        {"id": 12, "price": 2500},
    ]
