"""
Cart pricing
============
Quotes every package line in a cart against one shared allRooms/allTours
snapshot so all lines see the same reference data.

A line the engine rejects is reported in CartQuote.errors and skipped; it
never aborts the rest of the cart.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from package_pricing import (
    DATE_MODE_RANGE,
    DEFAULT_HOTEL_PACKAGE,
    DateContext,
    GuestCounts,
    PackagePriceEngine,
    PriceBreakdown,
    PricingEngineError,
)

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    package: Any
    guests: Any
    date_context: Any
    hotel_package: str = DEFAULT_HOTEL_PACKAGE
    quantity: Any = 1
    item_id: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CartLine':
        """Build from a cart item as posted by the booking page."""
        package = data.get('packageData')
        if package is None:
            package = data.get('itemDetails')
        return cls(
            package=package,
            guests=GuestCounts.from_dict(data),
            date_context=DateContext(
                mode=data.get('dateMode') or DATE_MODE_RANGE,
                start_date=data.get('startDate'),
                end_date=data.get('endDate'),
                selected_date=data.get('selectedDate'),
            ),
            hotel_package=data.get('hotelPackage') or DEFAULT_HOTEL_PACKAGE,
            quantity=data.get('quantity', 1),
            item_id=data.get('itemId'),
        )


@dataclass(frozen=True)
class PricedCartLine:
    line: CartLine
    breakdown: PriceBreakdown
    quantity: int
    line_total: Decimal


@dataclass(frozen=True)
class CartQuote:
    lines: Tuple[PricedCartLine, ...]
    subtotal: Decimal
    total: Decimal
    errors: Tuple[Dict[str, Any], ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': not self.errors,
            'items': [
                {
                    'itemId': priced.line.item_id,
                    'quantity': priced.quantity,
                    'lineTotal': float(priced.line_total),
                    'priceBreakdown': priced.breakdown.to_dict(),
                }
                for priced in self.lines
            ],
            'subtotal': float(self.subtotal),
            'total': float(self.total),
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


def _line_quantity(line: CartLine, warnings: List[str]) -> int:
    try:
        quantity = int(line.quantity)
    except (TypeError, ValueError):
        quantity = 0
    if quantity < 1:
        message = f"Cart item {line.item_id}: quantity {line.quantity!r} is invalid, using 1"
        logger.warning(message)
        warnings.append(message)
        quantity = 1
    return quantity


def quote_cart(
    lines: Iterable[Any],
    all_rooms: Optional[Sequence[Any]] = None,
    all_tours: Optional[Sequence[Any]] = None,
    engine: Optional[PackagePriceEngine] = None,
) -> CartQuote:
    """
    Price all cart lines and sum them.

    Args:
        lines: CartLine objects or cart item mappings
        all_rooms: room reference snapshot shared by every line
        all_tours: tour reference snapshot shared by every line
        engine: engine to use (default PackagePriceEngine())

    Returns:
        CartQuote with per-line breakdowns and line_total = total × quantity
    """
    engine = engine or PackagePriceEngine()
    all_rooms = list(all_rooms or [])
    all_tours = list(all_tours or [])

    priced_lines: List[PricedCartLine] = []
    errors: List[Dict[str, Any]] = []
    warnings: List[str] = []

    for line in lines:
        if isinstance(line, Mapping):
            line = CartLine.from_dict(line)

        try:
            breakdown = engine.calculate_package_price(
                line.package,
                line.guests,
                line.date_context,
                hotel_package=line.hotel_package,
                all_rooms=all_rooms,
                all_tours=all_tours,
            )
        except PricingEngineError as e:
            logger.error(f"Cart item {line.item_id} could not be priced: {e}")
            errors.append({'itemId': line.item_id, 'error': str(e)})
            continue

        quantity = _line_quantity(line, warnings)
        priced_lines.append(PricedCartLine(
            line=line,
            breakdown=breakdown,
            quantity=quantity,
            line_total=breakdown.total * quantity,
        ))

    subtotal = sum((p.breakdown.subtotal * p.quantity for p in priced_lines), Decimal('0'))
    total = sum((p.line_total for p in priced_lines), Decimal('0'))

    logger.info(
        f"Cart quoted: {len(priced_lines)} line(s), {len(errors)} error(s), total={total}"
    )
    return CartQuote(
        lines=tuple(priced_lines),
        subtotal=subtotal,
        total=total,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )
