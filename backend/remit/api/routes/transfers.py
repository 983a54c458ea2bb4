"""Transfer Routes — create, read, transition and pay out transfers.

Invariants:
    - POST /transfers honours Idempotency-Key; a replay answers 200 with the original
      transfer and `Idempotent-Replayed: true`
    - /transfers/lookup is registered before /transfers/{transfer_id}
    - PATCH is a pure status transition; POST /{id}/payout runs the rail adapter
    - Lookup never returns recipient account details

Design Decisions:
    - Routes only translate HTTP to orchestrator calls; every rule lives in the service
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response

from remit.api.dependencies import get_caller, get_orchestrator
from remit.schemas.transfer import (
    LookupResponse, PayoutResponse, PayoutResultResponse, ReceiptResponse,
    TransferCreate, TransferDetailResponse, TransferResponse, TransferStatusUpdate,
)
from remit.services.transfer_orchestrator import (
    Caller, TransferOrchestrator, parse_transfer_status,
)

router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.post("", response_model=TransferResponse)
async def create_transfer(
    body: TransferCreate,
    response: Response,
    idempotency_key: str | None = Header(None),
    caller: Caller = Depends(get_caller),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    transfer, replayed = await orchestrator.create_transfer(
        body.to_request(), idempotency_key, caller,
    )
    if replayed:
        response.headers["Idempotent-Replayed"] = "true"
    return TransferResponse.model_validate(transfer)


@router.get("/lookup", response_model=LookupResponse)
async def lookup_transfer(
    reference: str | None = Query(None),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    transfer = await orchestrator.lookup(reference)
    return LookupResponse.from_transfer(transfer)


@router.get("/{transfer_id}", response_model=TransferDetailResponse)
async def get_transfer(
    transfer_id: UUID,
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    transfer = await orchestrator.get_transfer(transfer_id)
    return TransferDetailResponse.from_transfer(transfer)


@router.patch("/{transfer_id}", response_model=TransferDetailResponse)
async def update_transfer_status(
    transfer_id: UUID,
    body: TransferStatusUpdate,
    caller: Caller = Depends(get_caller),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    next_status = parse_transfer_status(body.status)
    transfer = await orchestrator.transition(transfer_id, next_status, caller)
    return TransferDetailResponse.from_transfer(transfer)


@router.post("/{transfer_id}/payout", response_model=PayoutResponse)
async def execute_payout(
    transfer_id: UUID,
    caller: Caller = Depends(get_caller),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    outcome = await orchestrator.execute_payout(transfer_id, caller)
    return PayoutResponse(
        ok=outcome.ok,
        payout=PayoutResultResponse(
            ok=outcome.result.ok,
            provider=outcome.result.provider,
            mode=outcome.result.mode.value,
            reason=outcome.result.reason,
        ),
        transfer=TransferDetailResponse.from_transfer(outcome.transfer),
    )


@router.post("/{transfer_id}/receipt", response_model=ReceiptResponse)
async def resend_receipt(
    transfer_id: UUID,
    caller: Caller = Depends(get_caller),
    orchestrator: TransferOrchestrator = Depends(get_orchestrator),
):
    await orchestrator.resend_receipt(transfer_id, caller)
    return ReceiptResponse(ok=True)
