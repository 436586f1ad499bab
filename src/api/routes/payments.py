"""Payment API Routes

FastAPI routes for the invoice payment ledger: recording and deleting
payments, payment history and on-demand reconciliation.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Header, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.schemas.payment_request import RecordPaymentRequestSchema
from src.app.use_cases.payments import (
    RecordPayment,
    DeletePayment,
    ReconcileInvoice,
    ListPayments,
    RecordPaymentCommandDTO,
    DeletePaymentCommandDTO,
    RecordPaymentResponseDTO,
    DeletePaymentResponseDTO,
    PaymentHistoryResponseDTO,
    InvoicePaymentStateDTO,
)
from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.repositories.activity_log_repository import SqlAlchemyActivityLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session, get_lock_manager
from src.api.error import ClientError

router = APIRouter(prefix="/billing", tags=["Payments"])

NOT_FOUND_CODES = {"INVOICE_NOT_FOUND", "PAYMENT_NOT_FOUND"}


def raise_for_error(error: Error):
    """Map a use case error code onto an HTTP status"""
    if error.code in NOT_FOUND_CODES:
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    if error.code == "CONCURRENT_MODIFICATION":
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    if error.code == "STORAGE_FAILURE":
        raise ClientError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    raise ClientError(error)


@router.post(
    "/invoices/{invoice_id}/payments",
    response_model=RecordPaymentResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {
            "description": "Invoice not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVOICE_NOT_FOUND",
                            "message": "Invoice with ID 4f1c2a9e not found"
                        }
                    }
                }
            }
        },
        400: {
            "description": "Invalid amount",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVALID_AMOUNT",
                            "message": "Payment amount must be greater than 0, got 0"
                        }
                    }
                }
            }
        },
        409: {"description": "Invoice is busy, retry later"},
        503: {"description": "Storage did not respond in time"},
    }
)
async def record_payment(
    invoice_id: str,
    request: RecordPaymentRequestSchema,
    actor_id: str = Header(..., alias="X-Actor-Id", min_length=1),
    session: AsyncSession = Depends(get_session),
    lock_manager: InvoiceLockManager = Depends(get_lock_manager),
):
    """
    Record a payment against an invoice.

    The invoice's paid amount, remaining amount, status and last payment
    date are recomputed from all of its payments in the same transaction.

    **Headers:**
    - `X-Actor-Id` (required): User recording the payment

    **Example request:**
    ```json
    {
      "amount": "5000.00",
      "payment_method": "bank_transfer",
      "payment_date": "2024-02-10T00:00:00Z",
      "transaction_reference": "UTR123456"
    }
    ```

    **Returns:**
    - 201: Payment recorded
    - 400: Invalid amount or overpayment
    - 404: Invoice not found
    - 409: Invoice lock could not be acquired
    - 503: Storage failure
    """
    # Create UnitOfWork, repositories and services
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)
    audit_emitter = AuditEmitter(uow, SqlAlchemyActivityLogRepository(session))

    # Convert request schema to command DTO
    command = RecordPaymentCommandDTO(
        invoice_id=invoice_id,
        actor_id=actor_id,
        amount=request.amount,
        payment_method=request.payment_method,
        payment_date=request.payment_date,
        transaction_reference=request.transaction_reference,
        notes=request.notes,
    )

    # Execute use case
    use_case = RecordPayment(
        uow,
        invoice_repo,
        payment_repo,
        audit_emitter,
        lock_manager,
        storage_timeout_seconds=ApplicationConfig.STORAGE_TIMEOUT_SECONDS,
        prevent_overpayment=ApplicationConfig.PREVENT_OVERPAYMENT,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/invoices/{invoice_id}/payments",
    response_model=PaymentHistoryResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def list_payments(
    invoice_id: str,
    session: AsyncSession = Depends(get_session),
):
    """
    Payment history of an invoice, most recent payment first.

    **Returns:**
    - 200: Invoice state and its payments
    - 404: Invoice not found
    """
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)

    use_case = ListPayments(invoice_repo, payment_repo)
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete(
    "/payments/{payment_id}",
    response_model=DeletePaymentResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: {
            "description": "Payment not found",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_NOT_FOUND",
                            "message": "Payment record not found"
                        }
                    }
                }
            }
        },
    }
)
async def delete_payment(
    payment_id: str,
    actor_id: str = Header(..., alias="X-Actor-Id", min_length=1),
    session: AsyncSession = Depends(get_session),
    lock_manager: InvoiceLockManager = Depends(get_lock_manager),
):
    """
    Delete a payment record and reconcile its invoice.

    **Headers:**
    - `X-Actor-Id` (required): User deleting the payment

    **Returns:**
    - 200: Payment deleted, updated invoice state returned
    - 404: Payment record not found
    - 409: Invoice lock could not be acquired
    - 503: Storage failure
    """
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)
    audit_emitter = AuditEmitter(uow, SqlAlchemyActivityLogRepository(session))

    command = DeletePaymentCommandDTO(payment_id=payment_id, actor_id=actor_id)

    use_case = DeletePayment(
        uow,
        invoice_repo,
        payment_repo,
        audit_emitter,
        lock_manager,
        storage_timeout_seconds=ApplicationConfig.STORAGE_TIMEOUT_SECONDS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/invoices/{invoice_id}/reconcile",
    response_model=InvoicePaymentStateDTO,
    status_code=status.HTTP_200_OK,
)
async def reconcile_invoice(
    invoice_id: str,
    actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
    session: AsyncSession = Depends(get_session),
    lock_manager: InvoiceLockManager = Depends(get_lock_manager),
):
    """
    Recompute an invoice's payment-derived fields from its payments.

    Idempotent: running it on a consistent invoice changes nothing.

    **Returns:**
    - 200: Reconciled invoice state
    - 404: Invoice not found
    """
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    payment_repo = SqlAlchemyPaymentRepository(session)
    audit_emitter = AuditEmitter(uow, SqlAlchemyActivityLogRepository(session))

    use_case = ReconcileInvoice(
        uow,
        invoice_repo,
        payment_repo,
        lock_manager,
        audit_emitter=audit_emitter,
        storage_timeout_seconds=ApplicationConfig.STORAGE_TIMEOUT_SECONDS,
    )
    result = await use_case.execute(invoice_id, actor_id=actor_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
