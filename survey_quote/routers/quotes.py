from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_orchestrator
from ..schemas import QuoteSubmission, SubmitQuoteResponse
from ..submission import SubmissionOrchestrator

router = APIRouter(tags=["quotes"])


@router.post("/submitQuote", response_model=SubmitQuoteResponse, response_model_exclude_none=True)
def submit_quote(
    submission: QuoteSubmission,
    orchestrator: SubmissionOrchestrator = Depends(get_orchestrator),
):
    """
    Accept a quote request from the map client.

    - Prices the job and flags auto-quote eligibility
    - Emails the internal summary and logs to the sheet in the background
    - Acknowledges right away; notification outcome is never reported back
    """
    ack = orchestrator.submit(submission)
    if ack.status == "error":
        return JSONResponse(
            status_code=500,
            content=ack.model_dump(by_alias=True, exclude_none=True),
        )
    return ack
