# src/flokkk/api/v1/endpoints/ai.py
"""AI assistant endpoints: chat, post classification and usage status."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from flokkk.api.v1.dependencies import CurrentUserDep, SessionDep
from flokkk.core.errors import ValidationError
from flokkk.core.settings import settings
from flokkk.schemas.ai import ChatRequest, ChatResponse, ClassifyRequest, ClassifyResponse
from flokkk.services.ai import ChatOrchestrator, WebSearchQuotaService, get_chat_orchestrator
from flokkk.services.ai.rate_limiter import REQUEST_MANUAL, REQUEST_SUGGESTION

router = APIRouter(prefix="/ai", tags=["ai"])


def get_orchestrator_dep() -> ChatOrchestrator:
    """Dependency provider so tests can swap in fake backends."""
    return get_chat_orchestrator()


OrchestratorDep = Annotated[ChatOrchestrator, Depends(get_orchestrator_dep)]


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    orchestrator: OrchestratorDep,
) -> dict[str, Any]:
    """Answer a question from community content, and from the web on request.

    Raises:
        RateLimitedError: If the caller used up their hourly allowance
    """
    result = await orchestrator.handle_user_query(
        db,
        payload.query.strip(),
        current_user,
        theme=payload.theme,
        web_search_requested=payload.web_search,
        request_type=payload.request_type,
    )
    return result.as_dict()


@router.post("/classify", response_model=ClassifyResponse)
async def classify(
    payload: ClassifyRequest,
    current_user: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> dict[str, Any]:
    """Suggest a category for a post from its title and description."""
    title = (payload.title or "").strip()
    if not title:
        raise ValidationError("Missing title")

    classification = await orchestrator.classify(current_user, title, payload.description)
    return {
        "category": classification.category,
        "original_response": classification.original_response,
    }


@router.get("/status")
async def ai_status(
    current_user: CurrentUserDep,
    db: SessionDep,
    orchestrator: OrchestratorDep,
) -> dict[str, Any]:
    """Report which backends are configured and how much of each limit is left."""
    limiter = orchestrator.rate_limiter
    return {
        "user_id": current_user.id,
        "services": {
            "classifier": {
                "available": bool(settings.anthropic_api_key),
                "model": settings.classifier_model,
            },
            "web_search": {"available": bool(settings.tavily_api_key)},
        },
        "rate_limits": {
            REQUEST_MANUAL: limiter.status(current_user.id, REQUEST_MANUAL).as_dict(),
            REQUEST_SUGGESTION: limiter.status(current_user.id, REQUEST_SUGGESTION).as_dict(),
        },
        "web_search_quota": WebSearchQuotaService.check(db, current_user.id).as_dict(),
    }
