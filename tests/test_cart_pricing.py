from decimal import Decimal

from cart_pricing import CartLine, quote_cart
from package_pricing import DateContext, GuestCounts


def test_cart_sums_lines_with_quantity(all_tours):
    lines = [
        CartLine(
            package={"id": 1, "rooms": [{"name": "Room", "price": 100}]},
            guests=GuestCounts(adults=2),
            date_context=DateContext.range("2025-07-10", "2025-07-12"),
            quantity=2,
            item_id=1,
        ),
        {
            "itemId": 2,
            "packageData": {"id": 2, "selectedTourId": 9},
            "adults": 1,
            "dateMode": "single",
            "selectedDate": "2025-07-10",
        },
    ]

    quote = quote_cart(lines, all_tours=all_tours)

    assert [p.line_total for p in quote.lines] == [Decimal("800"), Decimal("50")]
    assert quote.subtotal == 850
    assert quote.total == 850
    assert quote.errors == ()
    assert quote.to_dict()["success"] is True


def test_bad_line_is_reported_and_skipped():
    lines = [
        {"itemId": 7, "packageData": "not-a-package", "adults": 1},
        {"itemId": 8, "packageData": {"duration": 2}, "adults": 1,
         "hotelPackage": "luxury", "dateMode": "single"},
    ]
    quote = quote_cart(lines)

    assert len(quote.lines) == 1
    assert quote.total == 300 * 2 * 1
    assert quote.errors[0]["itemId"] == 7
    assert quote.to_dict()["success"] is False


def test_invalid_quantity_counts_once():
    line = CartLine(
        package={"duration": 1},
        guests={"adults": 1},
        date_context={"mode": "single"},
        hotel_package="deluxe",
        quantity=0,
        item_id=3,
    )
    quote = quote_cart([line])
    assert quote.lines[0].quantity == 1
    assert quote.total == 150
    assert quote.warnings
