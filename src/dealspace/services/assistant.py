from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple

from dealspace.citations import SourceCitation, format_sources, recover_citations
from dealspace.config import Settings, get_settings
from dealspace.context import AssembledContext, AssistantMode, assemble_context
from dealspace.errors import CompletionError, NothingToSummarizeError, StorageError
from dealspace.extract import detect_strategy
from dealspace.llm import CompletionGateway, get_completion_gateway
from dealspace.logging_config import AUDIT_LOGGER_NAME
from dealspace.prompt_builder import ChatMessage, build_qa_messages, build_summary_messages
from dealspace.storage import (
    DocumentMetadataStore,
    DocumentRef,
    FileSystemObjectStorage,
    JsonManifestDocumentStore,
    ObjectStorage,
)
from dealspace.summary import extract_key_points
from dealspace.telemetry import (
    emit_completion_request,
    emit_completion_result,
    emit_context_event,
    emit_document_event,
    emit_exception,
)

LOGGER = logging.getLogger(__name__)
AUDIT_LOGGER = logging.getLogger(AUDIT_LOGGER_NAME)

NO_DOCUMENTS_TO_SUMMARIZE = "No documents found to summarize"
NO_EXTRACTABLE_CONTENT = "Could not extract content from the documents"


@dataclass(slots=True)
class AnswerResult:
    """Structured result returned from :meth:`DealAssistantService.answer`."""

    deal_id: str
    content: str
    citations: List[SourceCitation] = field(default_factory=list)

    @property
    def sources(self) -> List[str]:
        return format_sources(self.citations)


@dataclass(slots=True)
class SummaryResult:
    """Structured result returned from :meth:`DealAssistantService.summarize`."""

    deal_id: str
    summary: str
    key_points: List[str]
    document_count: int


class DealAssistantService:
    """Q&A and summarisation over the documents uploaded to a deal."""

    def __init__(
        self,
        *,
        document_store: DocumentMetadataStore,
        object_storage: ObjectStorage,
        gateway: CompletionGateway,
        settings: Settings | None = None,
    ) -> None:
        self.document_store = document_store
        self.object_storage = object_storage
        self.gateway = gateway
        self.settings = settings or get_settings()

    async def answer(self, deal_id: str, messages: Sequence[Mapping[str, str]]) -> AnswerResult:
        documents = await self._load_documents(deal_id)
        context = self._assemble(deal_id, documents, AssistantMode.QA, self.settings.qa_context_budget)
        prompt = build_qa_messages(context, messages)
        completion_content = await self._complete(deal_id, prompt)

        citations = recover_citations(completion_content, context.included_names)
        result = AnswerResult(deal_id=deal_id, content=completion_content, citations=citations)
        AUDIT_LOGGER.info(
            {
                "event": "answer",
                "deal_id": deal_id,
                "considered": context.considered,
                "included": context.included_names,
                "sources": result.sources,
            }
        )
        return result

    async def summarize(self, deal_id: str) -> SummaryResult:
        documents = await self._load_documents(deal_id)
        if not documents:
            raise NothingToSummarizeError(NO_DOCUMENTS_TO_SUMMARIZE)

        context = self._assemble(
            deal_id, documents, AssistantMode.SUMMARIZE, self.settings.summary_context_budget
        )
        if not context.has_extractable_content:
            raise NothingToSummarizeError(NO_EXTRACTABLE_CONTENT)

        summary = await self._complete(deal_id, build_summary_messages(context))
        result = SummaryResult(
            deal_id=deal_id,
            summary=summary,
            key_points=extract_key_points(summary),
            document_count=len(context.included),
        )
        AUDIT_LOGGER.info(
            {
                "event": "summarize",
                "deal_id": deal_id,
                "considered": context.considered,
                "included": context.included_names,
                "key_points": len(result.key_points),
            }
        )
        return result

    async def _load_documents(self, deal_id: str) -> List[Tuple[DocumentRef, bytes]]:
        """Download each listed document in order, skipping retrieval failures."""

        refs = await self.document_store.list_documents(deal_id)
        loaded: List[Tuple[DocumentRef, bytes]] = []
        for ref in refs:
            started = time.perf_counter()
            try:
                data = await self.object_storage.download(ref.storage_path)
            except StorageError as error:
                LOGGER.error("Error downloading %s: %s", ref.name, error)
                emit_document_event(
                    "document.download",
                    deal_id=deal_id,
                    document_name=ref.name,
                    error=error,
                )
                continue
            emit_document_event(
                "document.download",
                deal_id=deal_id,
                document_name=ref.name,
                size_bytes=len(data),
                duration_ms=(time.perf_counter() - started) * 1000.0,
            )
            loaded.append((ref, data))
        return loaded

    def _assemble(
        self,
        deal_id: str,
        documents: Sequence[Tuple[DocumentRef, bytes]],
        mode: AssistantMode,
        budget: int,
    ) -> AssembledContext:
        context = assemble_context(documents, mode, budget)
        for item in context.included:
            emit_document_event(
                "document.extract",
                deal_id=deal_id,
                document_name=item.document.name,
                strategy=detect_strategy(item.document.name).value,
                structure=item.content.structure,
                segments=item.content.segment_count,
                degraded=item.content.degraded,
            )
        emit_context_event(
            deal_id=deal_id,
            mode=mode.value,
            budget=budget,
            considered=context.considered,
            included=context.included_names,
            truncated=context.truncated_names,
            context_chars=len(context.text),
        )
        return context

    async def _complete(self, deal_id: str, prompt: List[ChatMessage]) -> str:
        req_id = uuid.uuid4().hex
        emit_completion_request(
            req_id=req_id,
            deal_id=deal_id,
            model=self.gateway.model_name,
            message_count=len(prompt),
            prompt_chars=sum(len(message["content"]) for message in prompt),
        )
        started = time.perf_counter()
        try:
            result = await self.gateway.complete(prompt)
        except CompletionError as error:
            emit_exception(module=f"{__name__}.gateway", error=error, req_id=req_id, deal_id=deal_id)
            raise
        emit_completion_result(
            req_id=req_id,
            deal_id=deal_id,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            model=result.model,
            answer_preview=result.content,
            usage=result.usage,
        )
        return result.content


_assistant_service: DealAssistantService | None = None


def get_assistant_service() -> DealAssistantService:
    """FastAPI dependency returning the shared :class:`DealAssistantService`."""

    global _assistant_service
    if _assistant_service is None:
        settings = get_settings()
        _assistant_service = DealAssistantService(
            document_store=JsonManifestDocumentStore(settings.storage_dir),
            object_storage=FileSystemObjectStorage(settings.storage_dir),
            gateway=get_completion_gateway(settings),
            settings=settings,
        )
    return _assistant_service
