"""
Package Price Engine
====================
Price breakdown for a bookable travel package:
  - Field normalizer for array-or-JSON-string package fields
  - Tour selection resolver (selectedTourId / new-format / legacy ids)
  - Nights resolver (date range or package duration)
  - Room cost (first room only, Room Cost × Nights × PAX)
  - Tour cost (per-traveler pricing, or allTours fallback per_person/per_booking)
  - Excursions (reserved, always zero)
  - Hotel package upgrade surcharge
  - Optional VAT / service fee layer (disabled by default)
  - List-price savings for discounted packages (display only)

This module mirrors the booking-page calculation bit-for-bit. Cart totals and
booking totals MUST both come from here.

Contract: the engine never raises for malformed or missing data. Every
degradation is absorbed into a zero contribution and reported in
PriceBreakdown.warnings instead.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import json
import logging
import math
import re

from dateutil import parser as date_parser
from dateutil import tz

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = Decimal('100')

CHILD_TOUR_WEIGHT = Decimal('0.7')
INFANT_TOUR_WEIGHT = Decimal('0.1')

PRICING_MODE_PER_PERSON = 'per_person'
PRICING_MODE_PER_BOOKING = 'per_booking'

DATE_MODE_RANGE = 'range'
DATE_MODE_SINGLE = 'single'

DEFAULT_HOTEL_PACKAGE = 'standard'

# Surcharges are per night per adult/child, in room currency units (not minor units).
HOTEL_UPGRADES = {
    'standard': {'name': 'Standard', 'multiplier': Decimal('1'), 'price': Decimal('0')},
    'deluxe': {'name': 'Deluxe', 'multiplier': Decimal('1.2'), 'price': Decimal('150')},
    'luxury': {'name': 'Luxury', 'multiplier': Decimal('1.5'), 'price': Decimal('300')},
}

_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)', re.ASCII)
_SECONDS_PER_DAY = 24 * 3600


# =====================================================
# EXCEPTIONS
# =====================================================

class PricingEngineError(Exception):
    """Base exception for pricing engine errors"""
    pass

class InvalidConfigurationError(PricingEngineError):
    pass


# =====================================================
# INPUT / OUTPUT TYPES
# =====================================================

@dataclass
class PackageConfig:
    id: Optional[int] = None
    price: Any = None
    discounted_price: Any = None
    duration: Any = None
    rooms: Any = None
    selected_tour_id: Any = None
    tour_selection: Any = None
    pricing_mode: str = PRICING_MODE_PER_BOOKING

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PackageConfig':
        """Build from a package record; camelCase keys win over snake_case aliases."""
        def pick(camel, snake=None):
            if camel in data:
                return data[camel]
            return data.get(snake) if snake else None

        return cls(
            id=pick('id'),
            price=pick('price'),
            discounted_price=pick('discountedPrice', 'discounted_price'),
            duration=pick('duration'),
            rooms=pick('rooms'),
            selected_tour_id=pick('selectedTourId', 'selected_tour_id'),
            tour_selection=pick('tourSelection', 'tour_selection'),
            pricing_mode=pick('pricingMode', 'pricing_mode') or PRICING_MODE_PER_BOOKING,
        )


@dataclass
class GuestCounts:
    adults: int = 0
    children: int = 0
    infants: int = 0

    @property
    def total_pax(self) -> int:
        return self.adults + self.children + self.infants

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'GuestCounts':
        return cls(
            adults=data.get('adults', 0),
            children=data.get('children', 0),
            infants=data.get('infants', 0),
        )


@dataclass
class DateContext:
    mode: str = DATE_MODE_RANGE
    start_date: Any = None
    end_date: Any = None
    selected_date: Any = None

    @classmethod
    def range(cls, start_date, end_date) -> 'DateContext':
        return cls(mode=DATE_MODE_RANGE, start_date=start_date, end_date=end_date)

    @classmethod
    def single(cls, selected_date) -> 'DateContext':
        return cls(mode=DATE_MODE_SINGLE, selected_date=selected_date)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DateContext':
        return cls(
            mode=data.get('mode') or data.get('dateMode') or DATE_MODE_RANGE,
            start_date=data.get('startDate', data.get('start_date')),
            end_date=data.get('endDate', data.get('end_date')),
            selected_date=data.get('selectedDate', data.get('selected_date')),
        )


@dataclass(frozen=True)
class RoomLine:
    name: Any
    nights: int
    cost: Decimal


@dataclass(frozen=True)
class TourLine:
    name: str
    price: Decimal


@dataclass(frozen=True)
class ExcursionLine:
    name: str
    price: Decimal


@dataclass(frozen=True)
class TourSelection:
    tour_ids: Tuple[Any, ...] = ()
    # Only populated for the new per-traveler format
    pricing: Optional[Dict[Any, Dict[str, Decimal]]] = None


@dataclass(frozen=True)
class FeeSettings:
    vat_enabled: bool = False
    vat_rate: Decimal = Decimal('14')
    service_fee_enabled: bool = False
    service_fee_rate: Decimal = Decimal('2')
    minimum_service_fee: Decimal = Decimal('50')


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    total: Decimal
    rooms_cost: Decimal
    tours_cost: Decimal
    excursions_cost: Decimal
    upgrade_price: Decimal
    actual_nights: int
    total_pax: int
    rooms: Tuple[RoomLine, ...] = ()
    tours: Tuple[TourLine, ...] = ()
    excursions: Tuple[ExcursionLine, ...] = ()
    vat_amount: Decimal = Decimal('0')
    service_fee: Decimal = Decimal('0')
    # List-price comparison for discounted packages; never part of total
    has_discount: bool = False
    original_subtotal: Decimal = Decimal('0')
    original_total: Decimal = Decimal('0')
    savings: Decimal = Decimal('0')
    warnings: Tuple[str, ...] = ()
    validation_messages: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the booking page and the cart."""
        return {
            'subtotal': float(self.subtotal),
            'total': float(self.total),
            'roomsCost': float(self.rooms_cost),
            'toursCost': float(self.tours_cost),
            'excursionsCost': float(self.excursions_cost),
            'upgradePrice': float(self.upgrade_price),
            'actualNights': self.actual_nights,
            'totalPAX': self.total_pax,
            'vatAmount': float(self.vat_amount),
            'serviceFee': float(self.service_fee),
            'hasDiscount': self.has_discount,
            'originalSubtotal': float(self.original_subtotal),
            'originalTotal': float(self.original_total),
            'savings': float(self.savings),
            'breakdown': {
                'rooms': [
                    {'name': r.name, 'nights': r.nights, 'cost': float(r.cost)}
                    for r in self.rooms
                ],
                'tours': [{'name': t.name, 'price': float(t.price)} for t in self.tours],
                'excursions': [
                    {'name': e.name, 'price': float(e.price)} for e in self.excursions
                ],
            },
            'warnings': list(self.warnings),
            'validationMessages': list(self.validation_messages),
        }


# =====================================================
# HELPERS
# =====================================================

def _warn(warnings: Optional[List[str]], message: str) -> None:
    logger.warning(message)
    if warnings is not None:
        warnings.append(message)


def _to_decimal(value: Any, label: str, warnings: Optional[List[str]] = None) -> Decimal:
    """Money value -> Decimal. Missing or unparseable values count as 0."""
    if value is None or isinstance(value, bool):
        _warn(warnings, f"{label} is missing, using 0")
        return Decimal('0')
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        _warn(warnings, f"{label} is not a number ({value!r}), using 0")
        return Decimal('0')
    if not result.is_finite():
        _warn(warnings, f"{label} is not a finite number ({value!r}), using 0")
        return Decimal('0')
    return result


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def parse_package_array(value: Any, warnings: Optional[List[str]] = None) -> List[Any]:
    """
    Normalize an array-valued package field.

    The package provider delivers `rooms` and `tourSelection` either as a
    native list or as a JSON-encoded string.

    Returns:
        [] for None/empty, the list itself, or the decoded JSON list.
        Malformed JSON and non-list payloads yield [].
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            _warn(warnings, f"Malformed JSON array field ignored: {value[:50]!r}")
            return []
        if isinstance(decoded, list):
            return decoded
        _warn(warnings, f"JSON field is not an array ({type(decoded).__name__}), ignored")
        return []
    _warn(warnings, f"Unsupported array field type {type(value).__name__}, ignored")
    return []


def _parse_legacy_tour_id(value: Any) -> Optional[Any]:
    # Strings parse like a leading-integer prefix ("7 days" -> 7).
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        return int(match.group(1)) if match else None
    if _is_number(value):
        return value
    return None


def _parse_date(value: Any) -> Optional[datetime]:
    # Naive values are read as UTC so they compare against "...Z" timestamps.
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        parsed = date_parser.isoparse(value.strip())
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.UTC)
    return parsed


# =====================================================
# TOUR SELECTION RESOLVER
# =====================================================

class TourSelectionResolver:
    """
    Resolves which tours a package references.

    Precedence:
      1. selectedTourId (always wins, no per-traveler pricing)
      2. tourSelection, format decided by the FIRST element:
           new    -> [{id, adultPrice, childPrice, infantPrice}, ...] (minor units)
           legacy -> [6, 7, "8"]
      3. nothing
    """

    @staticmethod
    def resolve(package: PackageConfig, warnings: Optional[List[str]] = None) -> TourSelection:
        if package.selected_tour_id:
            return TourSelection(tour_ids=(package.selected_tour_id,))

        if not package.tour_selection:
            return TourSelection()

        parsed = parse_package_array(package.tour_selection, warnings)
        if not parsed:
            return TourSelection()

        first = parsed[0]
        if isinstance(first, Mapping) and 'id' in first:
            tour_ids = []
            pricing = {}
            for entry in parsed:
                if not isinstance(entry, Mapping) or not entry.get('id'):
                    continue
                tour_id = entry['id']
                tour_ids.append(tour_id)
                label = f"Tour #{tour_id}"
                pricing[tour_id] = {
                    'adult_price': _to_decimal(entry.get('adultPrice') or 0, label, warnings) / MINOR_UNITS_PER_MAJOR,
                    'child_price': _to_decimal(entry.get('childPrice') or 0, label, warnings) / MINOR_UNITS_PER_MAJOR,
                    'infant_price': _to_decimal(entry.get('infantPrice') or 0, label, warnings) / MINOR_UNITS_PER_MAJOR,
                }
            return TourSelection(tour_ids=tuple(tour_ids), pricing=pricing)

        tour_ids = []
        for raw in parsed:
            tour_id = _parse_legacy_tour_id(raw)
            if tour_id is None:
                _warn(warnings, f"Dropped non-numeric tour id {raw!r}")
                continue
            tour_ids.append(tour_id)
        return TourSelection(tour_ids=tuple(tour_ids))


# =====================================================
# NIGHTS RESOLVER
# =====================================================

class NightsResolver:

    @staticmethod
    def duration_nights(package: PackageConfig, warnings: Optional[List[str]] = None) -> int:
        if not package.duration:
            return 1
        try:
            nights = int(package.duration)
        except (TypeError, ValueError):
            _warn(warnings, f"Package duration {package.duration!r} is not a number, using 1 night")
            return 1
        if nights < 1:
            _warn(warnings, f"Package duration {nights} is below one night, using 1 night")
            return 1
        return nights

    @staticmethod
    def resolve(
        package: PackageConfig,
        date_context: DateContext,
        warnings: Optional[List[str]] = None
    ) -> int:
        """
        Nights used to scale the room cost.

        range mode with both dates: max(1, ceil(days between)), partial days round up.
        Anything else: package duration, else 1.
        """
        if (
            date_context.mode == DATE_MODE_RANGE
            and date_context.start_date
            and date_context.end_date
        ):
            try:
                start = _parse_date(date_context.start_date)
                end = _parse_date(date_context.end_date)
                if start is None or end is None:
                    raise ValueError("unsupported date value")
                seconds = (end - start).total_seconds()
            except (TypeError, ValueError, OverflowError) as e:
                _warn(
                    warnings,
                    f"Could not read date range {date_context.start_date!r} -> "
                    f"{date_context.end_date!r} ({e}), using package duration"
                )
                return NightsResolver.duration_nights(package, warnings)

            nights = math.ceil(seconds / _SECONDS_PER_DAY)
            if nights < 1:
                _warn(warnings, f"Date range spans {nights} night(s), billing 1 night")
                return 1
            return nights

        return NightsResolver.duration_nights(package, warnings)


# =====================================================
# ROOM COST CALCULATOR
# =====================================================

class RoomCostCalculator:
    """
    Prices the FIRST room of the package rooms, else of allRooms.

    Formula: Room Cost × Nights × PAX
    Cost scales with head count, not room occupancy.
    """

    @staticmethod
    def calculate(
        package_rooms: Sequence[Any],
        all_rooms: Sequence[Any],
        nights: int,
        total_pax: int,
        warnings: Optional[List[str]] = None
    ) -> Tuple[Decimal, List[RoomLine]]:
        source = package_rooms if package_rooms else all_rooms
        if not source:
            return Decimal('0'), []

        room = source[0]
        if not room or not isinstance(room, Mapping):
            if room:
                _warn(warnings, f"Room entry {room!r} is not an object, skipped")
            return Decimal('0'), []

        name = room.get('name')
        custom_price = room.get('customPrice')
        if custom_price is not None:
            unit_price = _to_decimal(custom_price, f"Room {name!r} customPrice", warnings)
        else:
            unit_price = _to_decimal(room.get('price'), f"Room {name!r} price", warnings)

        cost = unit_price * nights * total_pax
        return cost, [RoomLine(name=name, nights=nights, cost=cost)]


# =====================================================
# TOUR COST CALCULATOR
# =====================================================

class TourCostCalculator:

    @staticmethod
    def calculate(
        selection: TourSelection,
        all_tours: Sequence[Any],
        guests: GuestCounts,
        pricing_mode: str,
        warnings: Optional[List[str]] = None
    ) -> Tuple[Decimal, List[TourLine]]:
        """
        Sum tour costs in selection order.

        Per-traveler pricing (new format):
            adultPrice × adults + childPrice × children + infantPrice × infants
        allTours fallback (price in minor units):
            per_person  -> price × (adults + children × 0.7 + infants × 0.1)
            per_booking -> price, flat
        Tours matching neither source contribute nothing.
        """
        pricing = selection.pricing or {}
        is_per_person = pricing_mode == PRICING_MODE_PER_PERSON

        total = Decimal('0')
        lines: List[TourLine] = []

        for tour_id in selection.tour_ids:
            tour_pricing = pricing.get(tour_id)
            if tour_pricing is not None:
                cost = (
                    tour_pricing['adult_price'] * guests.adults
                    + tour_pricing['child_price'] * guests.children
                    + tour_pricing['infant_price'] * guests.infants
                )
                logger.debug(
                    f"Tour {tour_id} per-traveler cost: adults={guests.adults}, "
                    f"children={guests.children}, infants={guests.infants}, total={cost}"
                )
                total += cost
                lines.append(TourLine(name=f"Tour #{tour_id}", price=cost))
                continue

            tour = TourCostCalculator._find_tour(all_tours, tour_id)
            if tour is None:
                _warn(warnings, f"Tour {tour_id!r} not found, no cost added")
                continue

            tour_price = _to_decimal(tour.get('price'), f"Tour #{tour_id} price", warnings) / MINOR_UNITS_PER_MAJOR
            if is_per_person:
                weighted_pax = (
                    guests.adults
                    + guests.children * CHILD_TOUR_WEIGHT
                    + guests.infants * INFANT_TOUR_WEIGHT
                )
                cost = tour_price * weighted_pax
            else:
                cost = tour_price

            total += cost
            lines.append(TourLine(name=tour.get('name') or f"Tour #{tour_id}", price=cost))

        return total, lines

    @staticmethod
    def _find_tour(all_tours: Sequence[Any], tour_id: Any) -> Optional[Mapping]:
        for tour in all_tours:
            if not isinstance(tour, Mapping):
                continue
            candidate = tour.get('id')
            # True == 1 in Python; ids are never booleans
            if isinstance(candidate, bool) or isinstance(tour_id, bool):
                continue
            if candidate == tour_id:
                return tour
        return None


# =====================================================
# EXCURSIONS CALCULATOR
# =====================================================

class ExcursionCostCalculator:
    """Reserved for optional excursions; not wired to any data source yet."""

    @staticmethod
    def calculate() -> Tuple[Decimal, List[ExcursionLine]]:
        return Decimal('0'), []


# =====================================================
# HOTEL PACKAGE UPGRADE CALCULATOR
# =====================================================

class UpgradeCalculator:

    @staticmethod
    def calculate(
        hotel_package: Any,
        package_rooms_present: bool,
        nights: int,
        guests: GuestCounts,
        warnings: Optional[List[str]] = None
    ) -> Decimal:
        """
        surcharge × nights × (adults + children), infants excluded.
        Zero whenever the package carries its own rooms.
        """
        # Exact key match; "Deluxe" is an unknown tier like any other spelling.
        key = hotel_package or DEFAULT_HOTEL_PACKAGE
        upgrade = HOTEL_UPGRADES.get(key) if isinstance(key, str) else None
        if upgrade is None:
            _warn(warnings, f"Unknown hotel package {hotel_package!r}, using standard")
            upgrade = HOTEL_UPGRADES[DEFAULT_HOTEL_PACKAGE]

        if package_rooms_present:
            return Decimal('0')

        return upgrade['price'] * nights * (guests.adults + guests.children)


# =====================================================
# FEE CALCULATOR
# =====================================================

class FeeCalculator:

    @staticmethod
    def calculate(subtotal: Decimal, settings: FeeSettings) -> Tuple[Decimal, Decimal]:
        """Returns (vat_amount, service_fee); both zero unless enabled."""
        vat_amount = Decimal('0')
        service_fee = Decimal('0')

        if settings.vat_enabled:
            vat_amount = (subtotal * Decimal(str(settings.vat_rate)) / 100).quantize(
                Decimal('0.01'), ROUND_HALF_UP
            )

        if settings.service_fee_enabled:
            fee = subtotal * Decimal(str(settings.service_fee_rate)) / 100
            service_fee = max(fee, Decimal(str(settings.minimum_service_fee))).quantize(
                Decimal('0.01'), ROUND_HALF_UP
            )

        return vat_amount, service_fee


# =====================================================
# SAVINGS CALCULATOR
# =====================================================

class SavingsCalculator:
    """
    What the booking would cost at the undiscounted list price.

    Only applies when discountedPrice is set and below price. The list
    price (× PAX for per_person packages) is added on top of the priced
    components, VAT is reapplied at the same rate and the service fee is
    carried over unchanged:

        original_subtotal = list price + rooms + tours + excursions + upgrade
        original_total    = original_subtotal + VAT + service fee
        savings           = original_total - total
    """

    @staticmethod
    def calculate(
        package: PackageConfig,
        total_pax: int,
        components_cost: Decimal,
        total: Decimal,
        service_fee: Decimal,
        settings: FeeSettings,
        warnings: Optional[List[str]] = None
    ) -> Tuple[bool, Decimal, Decimal, Decimal]:
        zero = Decimal('0')
        if not package.discounted_price or package.price is None:
            return False, zero, zero, zero

        label = f"Package {package.id}"
        price = _to_decimal(package.price, f"{label} price", warnings)
        discounted = _to_decimal(package.discounted_price, f"{label} discountedPrice", warnings)
        if not discounted or discounted >= price:
            return False, zero, zero, zero

        if package.pricing_mode == PRICING_MODE_PER_PERSON:
            list_cost = price * total_pax
        else:
            list_cost = price

        original_subtotal = list_cost + components_cost
        original_vat = zero
        if settings.vat_enabled:
            original_vat = (original_subtotal * Decimal(str(settings.vat_rate)) / 100).quantize(
                Decimal('0.01'), ROUND_HALF_UP
            )
        original_total = original_subtotal + original_vat + service_fee
        return True, original_subtotal, original_total, original_total - total


# =====================================================
# MAIN PRICING ENGINE
# =====================================================

class PackagePriceEngine:
    """
    Computes a PriceBreakdown for one package booking.

    Pure and synchronous: no I/O, no shared mutable state. allRooms/allTours
    are caller-supplied snapshots.

    The package's own price/discountedPrice is never part of the subtotal.
    """

    def __init__(self, fee_settings: Optional[FeeSettings] = None):
        self.fee_settings = fee_settings or FeeSettings()

    def calculate_package_price(
        self,
        package_config: Any,
        guests: Any,
        date_context: Any,
        hotel_package: str = DEFAULT_HOTEL_PACKAGE,
        all_rooms: Optional[Sequence[Any]] = None,
        all_tours: Optional[Sequence[Any]] = None,
    ) -> PriceBreakdown:
        """
        Main pricing calculation.

        Args:
            package_config: PackageConfig or package record mapping
            guests: GuestCounts or {adults, children, infants}
            date_context: DateContext or {mode, startDate, endDate, selectedDate}
            hotel_package: upgrade tier (standard / deluxe / luxury)
            all_rooms: room reference table (prices in major units)
            all_tours: tour reference table (prices in minor units)

        Returns:
            PriceBreakdown

        Raises:
            InvalidConfigurationError: package_config is not a record at all
        """
        warnings: List[str] = []

        package = self._coerce_package(package_config)
        guest_counts = self._coerce_guests(guests, warnings)
        dates = self._coerce_dates(date_context, warnings)
        all_rooms = list(all_rooms or [])
        all_tours = list(all_tours or [])

        package_rooms = parse_package_array(package.rooms, warnings)
        selection = TourSelectionResolver.resolve(package, warnings)
        actual_nights = NightsResolver.resolve(package, dates, warnings)
        total_pax = guest_counts.total_pax

        rooms_cost, room_lines = RoomCostCalculator.calculate(
            package_rooms, all_rooms, actual_nights, total_pax, warnings
        )
        tours_cost, tour_lines = TourCostCalculator.calculate(
            selection, all_tours, guest_counts, package.pricing_mode, warnings
        )
        excursions_cost, excursion_lines = ExcursionCostCalculator.calculate()
        upgrade_price = UpgradeCalculator.calculate(
            hotel_package, bool(package_rooms), actual_nights, guest_counts, warnings
        )

        package_base_cost = Decimal('0')
        subtotal = package_base_cost + rooms_cost + tours_cost + excursions_cost + upgrade_price

        vat_amount, service_fee = FeeCalculator.calculate(subtotal, self.fee_settings)
        total = subtotal + vat_amount + service_fee
        has_discount, original_subtotal, original_total, savings = SavingsCalculator.calculate(
            package, total_pax, subtotal - package_base_cost, total, service_fee,
            self.fee_settings, warnings
        )

        logger.info(
            f"Package {package.id} priced: nights={actual_nights}, pax={total_pax}, "
            f"rooms={rooms_cost}, tours={tours_cost}, upgrade={upgrade_price}, total={total}"
        )

        return PriceBreakdown(
            subtotal=subtotal,
            total=total,
            rooms_cost=rooms_cost,
            tours_cost=tours_cost,
            excursions_cost=excursions_cost,
            upgrade_price=upgrade_price,
            actual_nights=actual_nights,
            total_pax=total_pax,
            rooms=tuple(room_lines),
            tours=tuple(tour_lines),
            excursions=tuple(excursion_lines),
            vat_amount=vat_amount,
            service_fee=service_fee,
            has_discount=has_discount,
            original_subtotal=original_subtotal,
            original_total=original_total,
            savings=savings,
            warnings=tuple(warnings),
            validation_messages=tuple(self._validation_messages(guest_counts, dates)),
        )

    # -------------------------------------------------
    # INPUT COERCION
    # -------------------------------------------------

    def _coerce_package(self, package_config: Any) -> PackageConfig:
        if isinstance(package_config, PackageConfig):
            return package_config
        if isinstance(package_config, Mapping):
            return PackageConfig.from_dict(package_config)
        raise InvalidConfigurationError(
            f"Package record must be a mapping, got {type(package_config).__name__}"
        )

    def _coerce_guests(self, guests: Any, warnings: List[str]) -> GuestCounts:
        if isinstance(guests, Mapping):
            guests = GuestCounts.from_dict(guests)
        elif not isinstance(guests, GuestCounts):
            _warn(warnings, f"Guest counts {guests!r} not understood, using 0 guests")
            return GuestCounts()

        counts = {}
        for label in ('adults', 'children', 'infants'):
            raw = getattr(guests, label)
            try:
                value = int(raw or 0)
            except (TypeError, ValueError):
                _warn(warnings, f"{label}={raw!r} is not a number, using 0")
                value = 0
            if value < 0:
                _warn(warnings, f"{label}={value} is negative, using 0")
                value = 0
            counts[label] = value
        return GuestCounts(**counts)

    def _coerce_dates(self, date_context: Any, warnings: List[str]) -> DateContext:
        if isinstance(date_context, DateContext):
            return date_context
        if isinstance(date_context, Mapping):
            return DateContext.from_dict(date_context)
        if date_context is not None:
            _warn(warnings, f"Date context {date_context!r} not understood, using package duration")
        return DateContext(mode=DATE_MODE_SINGLE)

    def _validation_messages(self, guests: GuestCounts, dates: DateContext) -> List[str]:
        messages = []
        if guests.adults <= 0:
            messages.append("Please select at least one adult.")
        if dates.mode == DATE_MODE_SINGLE:
            has_dates = bool(dates.selected_date)
        else:
            has_dates = bool(dates.start_date and dates.end_date)
        if not has_dates:
            messages.append("Please set the start and end date.")
        return messages


def calculate_package_price(
    package_config: Any,
    guests: Any,
    date_context: Any,
    hotel_package: str = DEFAULT_HOTEL_PACKAGE,
    all_rooms: Optional[Sequence[Any]] = None,
    all_tours: Optional[Sequence[Any]] = None,
    fee_settings: Optional[FeeSettings] = None,
) -> PriceBreakdown:
    """Module-level shortcut for PackagePriceEngine(fee_settings).calculate_package_price(...)."""
    engine = PackagePriceEngine(fee_settings)
    return engine.calculate_package_price(
        package_config, guests, date_context, hotel_package, all_rooms, all_tours
    )
