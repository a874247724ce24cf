# award.py
# Awarding a quote: RFQ -> awarded, winner -> accepted, every other quote -> rejected.
#
# The calls go out strictly one after another (RFQ, winner, losers in list
# order). Nothing is rolled back: if a call fails the RFQ and its quotes are
# left partially awarded, and the AwardError raised carries an AwardProgress
# recording the steps that did go through. Passing that progress back into
# award_quote() resumes, skipping the completed steps.

import logging
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from .api import ApiClient
from .errors import AwardError, ProcurementError, ValidationError
from .models import Quote, Rfq
from .services import quotes as quote_service
from .services import rfqs as rfq_service

logger = logging.getLogger(__name__)


class AwardStep(BaseModel):
    entity: Literal["rfq", "quote"]
    id: int
    status: str
    total_amount: Optional[float] = None

    @property
    def key(self) -> str:
        return f"{self.entity}:{self.id}:{self.status}"

    def describe(self) -> str:
        if self.entity == "rfq":
            return f"mark RFQ {self.id} as awarded"
        verb = "accept" if self.status == "accepted" else "reject"
        return f"{verb} quote {self.id}"


class AwardProgress(BaseModel):
    rfq_id: int
    winning_quote_id: int
    completed: List[str] = Field(default_factory=list)

    def is_done(self, step: AwardStep) -> bool:
        return step.key in self.completed


class AwardResult(BaseModel):
    progress: AwardProgress
    rfq: Optional[Rfq] = None
    quotes: List[Quote] = Field(default_factory=list)
    refreshed: bool = False


def plan_award(rfq_id: int, winning_quote_id: int, quotes: Sequence[Quote]) -> List[AwardStep]:
    winner = next((q for q in quotes if q.id == winning_quote_id), None)
    if winner is None:
        raise ValidationError(
            f"Quote {winning_quote_id} is not one of the quotes for RFQ {rfq_id}", field="winning_quote_id")

    steps = [
        AwardStep(entity="rfq", id=rfq_id, status="awarded"),
        # the amount is re-sent unchanged, nothing is renegotiated at award time
        AwardStep(entity="quote", id=winner.id, status="accepted", total_amount=winner.total_amount),
    ]
    steps.extend(
        AwardStep(entity="quote", id=q.id, status="rejected")
        for q in quotes if q.id != winning_quote_id
    )
    return steps


def _run_step(client: ApiClient, step: AwardStep) -> None:
    if step.entity == "rfq":
        rfq_service.update_rfq(client, step.id, status=step.status)
    elif step.total_amount is not None:
        quote_service.update_quote(client, step.id, status=step.status, total_amount=step.total_amount)
    else:
        quote_service.update_quote(client, step.id, status=step.status)


def award_quote(client: ApiClient, rfq_id: int, winning_quote_id: int, quotes: Sequence[Quote],
                confirmed: bool = False, progress: Optional[AwardProgress] = None) -> Optional[AwardResult]:
    """Award ``winning_quote_id`` on ``rfq_id``.

    Returns None without touching the API unless ``confirmed``. ``quotes`` is
    the caller's current list of quotes for the RFQ.
    """
    if not confirmed:
        logger.info("Award of quote %s on RFQ %s not confirmed; nothing sent", winning_quote_id, rfq_id)
        return None

    steps = plan_award(rfq_id, winning_quote_id, quotes)
    if progress is None:
        progress = AwardProgress(rfq_id=rfq_id, winning_quote_id=winning_quote_id)
    elif (progress.rfq_id, progress.winning_quote_id) != (rfq_id, winning_quote_id):
        raise ValidationError("Saved award progress belongs to a different award", field="progress")

    total = len(steps)
    for n, step in enumerate(steps, start=1):
        if progress.is_done(step):
            logger.debug("Skipping completed award step %s", step.key)
            continue
        try:
            _run_step(client, step)
        except ProcurementError as e:
            done = len(progress.completed)
            logger.error("Award of quote %s on RFQ %s failed at step %d/%d (%s): %s",
                         winning_quote_id, rfq_id, n, total, step.key, e)
            raise AwardError(
                f"Could not {step.describe()} (step {n} of {total}): {e}. "
                f"{done} of {total} steps completed; retry to resume from here.",
                step=step, progress=progress, cause=e,
            ) from e
        progress.completed.append(step.key)
        logger.info("Award step %d/%d done: %s", n, total, step.describe())

    result = AwardResult(progress=progress)
    try:
        result.rfq = rfq_service.get_rfq_by_id(client, rfq_id)
        result.quotes = quote_service.get_quotes_by_rfq_id(client, rfq_id)
        result.refreshed = True
    except ProcurementError as e:
        logger.warning("RFQ %s awarded but refreshing it failed: %s", rfq_id, e)
    return result
