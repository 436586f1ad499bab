"""CalculateTotals Use Case

Computes the totals breakdown of a quote or invoice draft.
"""

from libs.result import Result, Return, Error
from src.domain.exceptions import BillingDomainError, InvalidAmount
from src.domain.totals import LineItem, TaxRates, calculate_totals
from .dtos import CalculateTotalsCommandDTO, TotalsResponseDTO
from .errors import error_from_exception


class CalculateTotals:
    """
    Use Case: Document totals calculation

    Pure computation; nothing is read or written. Values are rounded to
    2 decimal places only when building the response.
    """

    async def execute(self, command: CalculateTotalsCommandDTO) -> Result[TotalsResponseDTO]:
        """
        Calculate totals for the given line items, discount, taxes and shipping

        Args:
            command: CalculateTotalsCommandDTO

        Returns:
            Result[TotalsResponseDTO]: Presented breakdown or validation error
        """
        try:
            line_items = [
                LineItem(
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    description=item.description,
                )
                for item in command.line_items
            ]
            tax_rates = TaxRates(cgst=command.cgst, sgst=command.sgst, igst=command.igst)

            breakdown = calculate_totals(
                line_items,
                discount_percent=command.discount_percent,
                shipping_charges=command.shipping_charges,
                tax_rates=tax_rates,
            )

        except BillingDomainError as e:
            return Return.err(error_from_exception(e, "Invalid totals input"))

        except ValueError as e:
            return Return.err(
                Error(
                    code=InvalidAmount.code,
                    message="Totals input contains a non-numeric value",
                    reason=str(e),
                )
            )

        return Return.ok(TotalsResponseDTO.from_breakdown(breakdown))
