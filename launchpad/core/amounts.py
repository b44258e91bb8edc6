"""Fixed-point amount conversion for the quote asset and sale tokens."""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from .errors import ValidationError


# Amounts travel as uint256
MAX_UNITS = 2**256 - 1
MAX_UNITS_DIGITS = len(str(MAX_UNITS))

class AmountCodec:
    """Converts human decimal strings to integer units at a fixed scale and back."""

    def __init__(self, decimals: int = 9):
        if decimals < 0:
            raise ValueError("decimals must be non-negative")
        self.decimals = decimals
        self._scale = Decimal(10) ** decimals

    @staticmethod
    def parse_decimal(text: str) -> Decimal:
        """Strictly parse ``text`` as a finite decimal number."""
        raw = (text or "").strip().replace("_", "")
        if not raw:
            raise ValidationError("Amount is empty")
        try:
            value = Decimal(raw)
        except (InvalidOperation, ValueError):
            raise ValidationError(f"'{text}' is not a number")
        if not value.is_finite():
            raise ValidationError(f"'{text}' is not a finite number")
        return value

    def is_number(self, text: str) -> bool:
        try:
            self.parse_decimal(text)
        except ValidationError:
            return False
        return True

    def to_units(self, value: Union[str, Decimal, int]) -> int:
        """Scale a human amount to integer units.

        Rejects values with more fractional digits than the scale instead of
        silently truncating them.
        """
        amount = value if isinstance(value, Decimal) else self.parse_decimal(str(value))
        if not amount.is_finite():
            raise ValidationError(f"'{value}' is not a finite number")
        # Bound the exponent before scaling; 1e999999 would overflow the context
        if amount and amount.adjusted() + self.decimals > MAX_UNITS_DIGITS:
            raise ValidationError(f"{value} is too large")
        if amount and amount.adjusted() < -self.decimals:
            raise ValidationError(f"{amount} has more than {self.decimals} decimal places")

        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + self.decimals + 2)
            try:
                scaled = amount * self._scale
                integral = scaled.to_integral_value()
            except ArithmeticError:
                raise ValidationError(f"{value} is out of range")
            if scaled != integral:
                raise ValidationError(
                    f"{amount} has more than {self.decimals} decimal places"
                )
            units = int(scaled)

        if abs(units) > MAX_UNITS:
            raise ValidationError(f"{value} is too large")
        return units

    def from_units(self, units: int) -> Decimal:
        units = int(units)
        with localcontext() as ctx:
            # uint256 values exceed the default 28 digit precision
            ctx.prec = max(ctx.prec, len(str(abs(units))) + self.decimals + 2)
            return Decimal(units) / self._scale

    def format(self, units: int) -> str:
        """Render integer units as a plain decimal string (``1.5``, ``100.0``)."""
        value = self.from_units(units)
        text = format(value, "f")
        if "." in text:
            text = text.rstrip("0")
            if text.endswith("."):
                text += "0"
        else:
            text += ".0"
        return text


__all__ = ["AmountCodec"]
