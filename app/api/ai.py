from fastapi import APIRouter, Depends

from app.dependencies.auth import get_current_identity
from app.dependencies.history import log_request_history
from app.dependencies.llm import get_llm_client
from app.dependencies.realtime import get_realtime_hub
from app.schemas import AnalyzeResponse, TokenIdentity
from app.services.analysis_service import AnalysisPipeline
from app.services.llm_interface import LLMInterface
from app.services.realtime import RealtimeHub

router = APIRouter(
    prefix="/api/ai",
    tags=["AI Analysis"],
    dependencies=[Depends(log_request_history)],
)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_latest_file(
    identity: TokenIdentity = Depends(get_current_identity),
    hub: RealtimeHub = Depends(get_realtime_hub),
    summarizer: LLMInterface = Depends(get_llm_client),
):
    """
    Summarise the caller's most recently uploaded file.

    Progress (and finally the summary itself) is also pushed to the caller's
    realtime room on ``ai_analysis_progress``.
    """
    insights = await AnalysisPipeline(hub, summarizer).run(identity.id)
    return AnalyzeResponse(message="AI analysis complete.", insights=insights)
