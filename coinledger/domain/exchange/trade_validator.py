"""
Admissibility rules for a proposed buy.

Every rule is evaluated on its own; the validator returns the messages
of all failing rules so they can be reported together.
"""

from dataclasses import dataclass
from decimal import Decimal, Overflow, localcontext

from coinledger.domain.exchange.entities import Currency

PRICE_ADJUSTED = "Price adjusted. Please try again."
INVALID_INPUTS = "Invalid inputs. Please try again."
MINIMUM_PURCHASE = "Minimum purchase of $1 is required."

SLIPPAGE_LOWER = Decimal("0.995")
SLIPPAGE_UPPER = Decimal("1.005")
MINIMUM_USD = Decimal("1")


def insufficient_funds_message(coin_amount: Decimal, coin: Currency) -> str:
    return f"Not enough funds to purchase {coin_amount} {coin.value}."


@dataclass(frozen=True)
class TradeProposal:
    """A client-submitted buy with the market context it is judged against."""

    coin: Currency
    usd_amount: Decimal
    coin_amount: Decimal
    current_price_usd: Decimal
    usd_balance: Decimal


class TradeValidator:
    """Decides whether a buy may execute.

    Args:
        slippage_lower: Smallest admissible live/implied price ratio.
        slippage_upper: Largest admissible live/implied price ratio.
        minimum_usd: Smallest purchase in USD.
    """

    def __init__(
        self,
        slippage_lower: Decimal = SLIPPAGE_LOWER,
        slippage_upper: Decimal = SLIPPAGE_UPPER,
        minimum_usd: Decimal = MINIMUM_USD,
    ) -> None:
        self._lower = slippage_lower
        self._upper = slippage_upper
        self._minimum = minimum_usd

    def price_within_tolerance(self, proposal: TradeProposal) -> bool:
        """Compare the live price with the implied unit price usd/coin.

        Inputs that make the implied price undefined are left to the
        input check and pass here.
        """
        usd, coins = proposal.usd_amount, proposal.coin_amount
        if not usd.is_finite() or not coins.is_finite() or coins == 0:
            return True
        if usd == 0:
            return False
        with localcontext() as ctx:
            # extreme exponents round to Infinity and fall outside the band
            ctx.traps[Overflow] = False
            ratio = proposal.current_price_usd * coins / usd
        return self._lower <= ratio <= self._upper

    @staticmethod
    def inputs_valid(proposal: TradeProposal) -> bool:
        """Both amounts finite and non-negative; zero coins has no unit price."""
        amounts = (proposal.usd_amount, proposal.coin_amount)
        if not all(amount.is_finite() and amount >= 0 for amount in amounts):
            return False
        return proposal.coin_amount != 0

    @staticmethod
    def funds_sufficient(proposal: TradeProposal) -> bool:
        if proposal.usd_amount.is_nan():
            return True
        return proposal.usd_amount <= proposal.usd_balance

    def meets_minimum(self, proposal: TradeProposal) -> bool:
        if proposal.usd_amount.is_nan():
            return True
        return proposal.usd_amount >= self._minimum

    def errors(self, proposal: TradeProposal) -> list[str]:
        """Return the message of every failing rule, in display order."""
        checks = [
            (PRICE_ADJUSTED, self.price_within_tolerance(proposal)),
            (
                insufficient_funds_message(proposal.coin_amount, proposal.coin),
                self.funds_sufficient(proposal),
            ),
            (INVALID_INPUTS, self.inputs_valid(proposal)),
            (MINIMUM_PURCHASE, self.meets_minimum(proposal)),
        ]
        return [message for message, passed in checks if not passed]
