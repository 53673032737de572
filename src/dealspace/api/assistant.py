"""API router exposing the deal space document assistant."""
from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from dealspace.errors import InvalidRequestError
from dealspace.services.assistant import (
    AnswerResult,
    DealAssistantService,
    SummaryResult,
    get_assistant_service,
)

router = APIRouter(tags=["deal-space-ai"])

SUMMARIZE_ACTION = "summarize"


class ChatMessage(BaseModel):
    role: str
    content: str


class AssistantRequest(BaseModel):
    """Body accepted by the assistant endpoint, in Q&A or summarise shape."""

    model_config = ConfigDict(populate_by_name=True)

    deal_id: Optional[str] = Field(None, alias="dealId")
    messages: Optional[Any] = None
    action: Optional[str] = None


class AnswerResponse(BaseModel):
    content: str
    sources: List[str]


class SummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    key_points: List[str] = Field(alias="keyPoints")
    document_count: int = Field(alias="documentCount")


def _parse_messages(raw: Any) -> List[ChatMessage]:
    if not isinstance(raw, list):
        raise InvalidRequestError("dealId and messages are required")
    try:
        return [ChatMessage.model_validate(item) for item in raw]
    except ValueError as exc:
        raise InvalidRequestError("Each message needs a role and content", cause=exc) from exc


def _answer_payload(result: AnswerResult) -> dict[str, Any]:
    return AnswerResponse(content=result.content, sources=result.sources).model_dump()


def _summary_payload(result: SummaryResult) -> dict[str, Any]:
    response = SummaryResponse(
        summary=result.summary,
        key_points=result.key_points,
        document_count=result.document_count,
    )
    return response.model_dump(by_alias=True)


@router.post("/deal-space-ai")
async def deal_space_ai(
    request: AssistantRequest,
    service: DealAssistantService = Depends(get_assistant_service),
) -> dict[str, Any]:
    """Answer a question about, or summarise, the documents of a deal."""

    if request.action == SUMMARIZE_ACTION:
        if not request.deal_id:
            raise InvalidRequestError("dealId is required")
        return _summary_payload(await service.summarize(request.deal_id))

    if not request.deal_id or request.messages is None:
        raise InvalidRequestError("dealId and messages are required")
    messages = _parse_messages(request.messages)
    result = await service.answer(request.deal_id, [message.model_dump() for message in messages])
    return _answer_payload(result)
