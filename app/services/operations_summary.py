"""
System-wide occupancy and collection figures for the operations view.
"""
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from app.core.degradation import SliceSpec, gather_slices
from app.core.logging import performance_timing
from app.models.common import ZERO
from app.schemas.operations import (
    OccupancySummary,
    OperationsSummary,
    PaymentProgress,
    PaymentStats,
    RoomStats,
    TenantStats,
)
from app.services.external import IdentityProvider, PaymentProvider, RoomProvider

logger = structlog.get_logger(__name__)


def payment_progress(collected: Decimal, outstanding: Decimal) -> PaymentProgress:
    """Collected versus outstanding as whole percentages that sum to 100."""
    total = collected + outstanding
    # Zero total counts as 1 so the percentages stay defined
    denominator = total or Decimal(1)
    collected_pct = int(
        (collected / denominator * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )
    collected_pct = min(max(collected_pct, 0), 100)
    return PaymentProgress(
        collected=collected,
        outstanding=outstanding,
        total=total,
        collected_pct=collected_pct,
        outstanding_pct=100 - collected_pct,
    )


class OperationsSummaryService:
    """Fans out to the statistics endpoints and derives headline figures."""

    def __init__(
        self,
        identity: IdentityProvider,
        rooms: RoomProvider,
        payments: PaymentProvider,
        log: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.identity = identity
        self.rooms = rooms
        self.payments = payments
        self.logger = log or logger

    async def _room_stats(self) -> RoomStats:
        return RoomStats.model_validate(await self.rooms.get_room_stats() or {})

    async def _tenant_stats(self) -> TenantStats:
        return TenantStats.model_validate(await self.identity.get_tenant_stats() or {})

    async def _payment_stats(self) -> PaymentStats:
        return PaymentStats.model_validate(await self.payments.get_payment_stats() or {})

    async def load_summary(self) -> OperationsSummary:
        """Occupancy and payment progress; failed statistics fall back to zeros."""
        with performance_timing("load_operations_summary", self.logger):
            outcome = await gather_slices(
                [
                    SliceSpec("rooms", default_factory=RoomStats, fetch=self._room_stats),
                    SliceSpec("tenants", default_factory=TenantStats, fetch=self._tenant_stats),
                    SliceSpec("payments", default_factory=PaymentStats, fetch=self._payment_stats),
                ],
                self.logger,
            )

        rooms: RoomStats = outcome.value("rooms")
        tenants: TenantStats = outcome.value("tenants")
        payments: PaymentStats = outcome.value("payments")

        summary = OperationsSummary(
            occupancy=OccupancySummary(
                total_rooms=rooms.total_rooms,
                occupied_rooms=rooms.fully_occupied_rooms + rooms.partially_occupied_rooms,
                maintenance_rooms=rooms.maintenance_rooms,
                total_tenants=tenants.total_tenants,
                active_tenants=tenants.active_tenants,
            ),
            payments=payment_progress(
                max(ZERO, payments.total_amount_collected),
                max(ZERO, payments.total_outstanding_amount),
            ),
            room_stats_error=outcome.failed("rooms"),
            tenant_stats_error=outcome.failed("tenants"),
            payment_stats_error=outcome.failed("payments"),
            fetched_at=datetime.now(timezone.utc),
        )

        self.logger.info(
            "operations_summary_loaded",
            failed_slices=outcome.failed_slices,
            collected_pct=summary.payments.collected_pct,
        )
        return summary
