"""Totals API Routes

Stateless document totals calculation.
"""

from fastapi import APIRouter, status

from src.api.schemas.payment_request import CalculateTotalsRequestSchema
from src.app.use_cases.payments import (
    CalculateTotals,
    CalculateTotalsCommandDTO,
    LineItemDTO,
    TotalsResponseDTO,
)
from src.api.error import ClientError

router = APIRouter(prefix="/billing", tags=["Totals"])


@router.post(
    "/totals",
    response_model=TotalsResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        400: {
            "description": "Invalid line item, rate or amount",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_RATE",
                            "message": "cgst must be between 0 and 100, got 120"
                        }
                    }
                }
            }
        }
    }
)
async def calculate_totals(request: CalculateTotalsRequestSchema):
    """
    Compute subtotal, discount, GST components, shipping and grand total.

    Amounts are computed at full precision and rounded to 2 decimal places
    (half-up) only in the response.

    **Returns:**
    - 200: Totals breakdown
    - 400: Negative quantity/price, rate outside 0-100, or negative shipping
    """
    command = CalculateTotalsCommandDTO(
        line_items=[
            LineItemDTO(
                quantity=item.quantity,
                unit_price=item.unit_price,
                description=item.description,
            )
            for item in request.line_items
        ],
        discount_percent=request.discount_percent,
        shipping_charges=request.shipping_charges,
        cgst=request.cgst,
        sgst=request.sgst,
        igst=request.igst,
    )

    result = await CalculateTotals().execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
