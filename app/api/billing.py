"""
Billing API endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body

from app.core.logging import get_logger
from app.schemas.dashboard import CorrectedBalanceResponse
from app.services.reconciliation import reconcile_balance

logger = get_logger(__name__)
router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/corrected-balance", response_model=CorrectedBalanceResponse)
async def corrected_balance(snapshot: Optional[Dict[str, Any]] = Body(None)):
    """
    Balance to display for a posted billing snapshot.

    Malformed numeric fields are read as zero; this endpoint never rejects
    a snapshot for its numbers.
    """
    result = reconcile_balance(snapshot, logger)
    return CorrectedBalanceResponse(
        corrected_balance=result.corrected_balance,
        outstanding_balance=result.outstanding_balance,
        deposit_credit=result.deposit_credit,
        source=result.source,
    )
