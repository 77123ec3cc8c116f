"""
Overdue roster service for the operations view.

Every read re-fetches the roster and re-classifies it; nothing is cached
between calls.
"""
from datetime import date, datetime, timezone
from typing import List, Optional

import structlog

from app.core.exceptions import OverdueServiceError, describe_error
from app.core.logging import performance_timing
from app.models import OverdueRecord
from app.schemas.overdue import OverdueCheckResponse, OverdueOverview, OverdueStats, OverdueTenant
from app.services.external import OverdueProvider
from app.services.overdue_classifier import (
    aggregate_overdue_stats,
    classify_roster,
    severity_display,
)

logger = structlog.get_logger(__name__)


class OverdueService:
    """Classifies the overdue roster and triggers provider-side checks."""

    def __init__(
        self,
        provider: OverdueProvider,
        log: Optional[structlog.stdlib.BoundLogger] = None,
    ):
        self.provider = provider
        self.logger = log or logger

    async def _fetch_roster(self, as_of: Optional[date]) -> List[OverdueRecord]:
        try:
            raw = await self.provider.get_overdue_tenants()
        except Exception as e:
            self.logger.error(
                "overdue_roster_fetch_failed",
                error=describe_error(e),
                error_type=type(e).__name__,
            )
            raise OverdueServiceError("fetch overdue tenants", describe_error(e)) from e

        return classify_roster(raw or [], as_of=as_of, log=self.logger)

    async def get_overdue_roster(self, as_of: Optional[date] = None) -> List[OverdueTenant]:
        """Classified roster, most severe and longest overdue first."""
        with performance_timing("get_overdue_roster", self.logger):
            records = await self._fetch_roster(as_of)
        return [OverdueTenant.from_record(r, severity_display(r.severity)) for r in records]

    async def get_overdue_stats(self, as_of: Optional[date] = None) -> OverdueStats:
        """Counts per severity tier and totals over the current roster."""
        with performance_timing("get_overdue_stats", self.logger):
            records = await self._fetch_roster(as_of)
        return aggregate_overdue_stats(records, self.logger)

    async def get_overdue_overview(self, as_of: Optional[date] = None) -> OverdueOverview:
        """Roster and statistics from a single provider fetch."""
        with performance_timing("get_overdue_overview", self.logger):
            records = await self._fetch_roster(as_of)

        return OverdueOverview(
            tenants=[OverdueTenant.from_record(r, severity_display(r.severity)) for r in records],
            stats=aggregate_overdue_stats(records, self.logger),
            generated_at=datetime.now(timezone.utc),
        )

    async def check_and_refresh(self, as_of: Optional[date] = None) -> OverdueCheckResponse:
        """
        Ask the provider to re-evaluate overdue status, then re-read the roster.

        The check result is reported as the provider returns it. A failure of
        the follow-up read does not hide a check that already ran.

        Raises:
            OverdueServiceError: If the check itself fails
        """
        try:
            result = await self.provider.check_overdue_payments()
        except Exception as e:
            self.logger.error(
                "overdue_check_failed",
                error=describe_error(e),
                error_type=type(e).__name__,
            )
            raise OverdueServiceError("check overdue payments", describe_error(e)) from e

        self.logger.info("overdue_check_completed", checked=result.checked, overdue=result.overdue)

        try:
            overview = await self.get_overdue_overview(as_of)
        except OverdueServiceError as e:
            self.logger.warning("overdue_refresh_after_check_failed", error=e.details)
            return OverdueCheckResponse(result=result, refresh_error=True)

        return OverdueCheckResponse(result=result, overview=overview)
