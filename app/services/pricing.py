"""Unit prices in cents for digital and printed photos."""
from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app import repository
from app.utils.exceptions import MissingPrintSizeError

PRINT_SIZES = ("10x15", "15x21", "20x25", "20x30")

# "digital" and "digital_printed" are base prices, sizes hold the print surcharge
DEFAULT_PRICES: dict[str, int] = {
    "digital": 1000,
    "digital_printed": 1500,
    "10x15": 0,
    "15x21": 500,
    "20x25": 1000,
    "20x30": 1500,
}

PRICE_DESCRIPTIONS: dict[str, str] = {
    "digital": "Foto digital",
    "digital_printed": "Foto digital + impressa (base)",
    "10x15": "Acréscimo impressão 10x15",
    "15x21": "Acréscimo impressão 15x21",
    "20x25": "Acréscimo impressão 20x25",
    "20x30": "Acréscimo impressão 20x30",
}


@dataclass(frozen=True)
class PriceTable:
    digital: int
    digital_printed: int
    surcharges: dict[str, int] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "PriceTable":
        return cls.from_mapping(DEFAULT_PRICES)

    @classmethod
    def from_mapping(cls, prices: dict[str, int]) -> "PriceTable":
        merged = {**DEFAULT_PRICES, **prices}
        return cls(
            digital=merged["digital"],
            digital_printed=merged["digital_printed"],
            surcharges={size: merged[size] for size in PRINT_SIZES},
        )

    def unit_price(self, format: str, print_size: str | None = None) -> int:
        if format == "digital":
            return self.digital
        if format == "digital_printed":
            if not print_size:
                raise MissingPrintSizeError()
            if print_size not in self.surcharges:
                raise ValueError(f"Unknown print size: {print_size}")
            return self.digital_printed + self.surcharges[print_size]
        raise ValueError(f"Unknown format: {format}")


def order_total(lines: Iterable[tuple[int, int]]) -> int:
    """Sum of unit_price * quantity over (unit_price, quantity) pairs."""
    return sum(unit_price * quantity for unit_price, quantity in lines)


async def load_price_table(db: AsyncSession) -> PriceTable:
    settings_rows = await repository.list_active_price_settings(db)
    return PriceTable.from_mapping({row.item_type: row.price for row in settings_rows})
