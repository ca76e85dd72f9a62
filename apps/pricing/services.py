"""Price calculation for stays."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore

from .models import PricingPhase


class PricingError(Exception):
    """Raised when a price cannot be calculated for the requested dates."""


@dataclass
class NightPrice:
    date: date
    price: Decimal
    phase: str | None = None


@dataclass
class PriceCalculation:
    nights: int
    base_price: Decimal
    cleaning_fee: Decimal
    total_price: Decimal
    price_per_night: Decimal
    breakdown: list[NightPrice] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        """JSON-friendly representation stored on the booking."""
        data = asdict(self)
        for key in ("base_price", "cleaning_fee", "total_price", "price_per_night"):
            data[key] = str(data[key])
        data["breakdown"] = [
            {"date": night.date.isoformat(), "price": str(night.price), "phase": night.phase}
            for night in self.breakdown
        ]
        return data


def _setting_decimal(name: str, default: str) -> Decimal:
    value = getattr(settings, name, None)
    if value in (None, ""):
        return Decimal(default)
    return Decimal(str(value))


def calculate_booking_price(start: date, end: date, use_family_price: bool = False) -> PriceCalculation:
    """
    Calculate the price of a stay from ``start`` (arrival) to ``end`` (departure).

    Every night ``start <= night < end`` is priced with the highest-priority
    active phase covering it, or the default nightly rate. The cleaning fee
    is added once per stay.
    """
    if end < start:
        raise PricingError(f"End date {end} is before start date {start}")

    default_price = _setting_decimal("BOOKING_BASE_PRICE", "140")
    if use_family_price:
        default_price = _setting_decimal("BOOKING_FAMILY_PRICE", str(default_price))
    cleaning_fee = _setting_decimal("BOOKING_CLEANING_FEE", "75")

    phases = list(
        PricingPhase.objects.active()
        .filter(start_date__lt=end, end_date__gte=start)
        .order_by("-priority", "start_date")
    )

    breakdown: list[NightPrice] = []
    current = start
    while current < end:
        night = NightPrice(date=current, price=default_price)
        for phase in phases:
            if phase.covers(current):
                night.price = phase.nightly_price(use_family_price)
                night.phase = phase.name
                break
        breakdown.append(night)
        current += timedelta(days=1)

    nights = len(breakdown)
    base_price = sum((night.price for night in breakdown), Decimal("0"))
    price_per_night = (base_price / nights).quantize(Decimal("0.01")) if nights else Decimal("0.00")

    warnings = []
    start_phase = next((phase for phase in phases if phase.covers(start)), None)
    if start_phase and start_phase.min_nights and nights < start_phase.min_nights:
        warnings.append(
            f"{start_phase.name} requires at least {start_phase.min_nights} nights, got {nights}"
        )

    return PriceCalculation(
        nights=nights,
        base_price=base_price,
        cleaning_fee=cleaning_fee,
        total_price=base_price + cleaning_fee,
        price_per_night=price_per_night,
        breakdown=breakdown,
        warnings=warnings,
    )
