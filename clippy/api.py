"""REST API routes: start, continue, list and describe conversations."""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from .assistant import UNTITLED, Assistant
from .database import get_db
from .errors import ChatError, DeadlineExceeded, EmptyConversation
from .store import append_message, create_conversation, get_conversation, list_conversations, set_title

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")


# ── Pydantic schemas ──────────────────────────────────────────

class MessageRequest(BaseModel):
    message: str

class StartConversationResponse(BaseModel):
    conversation_id: str
    title: str
    reply: str

class ContinueConversationResponse(BaseModel):
    reply: str

class MessageOut(BaseModel):
    id: int
    role: str
    content: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ConversationSummary(BaseModel):
    id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ConversationOut(ConversationSummary):
    messages: List[MessageOut] = []


# ── Dependencies / helpers ────────────────────────────────────

def get_assistant(request: Request) -> Assistant:
    """FastAPI dependency: the assistant built at startup."""
    return request.app.state.assistant


def _require_text(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="message must not be empty")
    return text


def _http_error(e: ChatError) -> HTTPException:
    if isinstance(e, EmptyConversation):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, DeadlineExceeded):
        return HTTPException(status_code=504, detail=str(e))
    return HTTPException(status_code=502, detail=f"{type(e).__name__}: {e}")


async def _load(db: AsyncSession, conversation_id: str):
    conversation = await get_conversation(db, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


# ── Conversations ─────────────────────────────────────────────

@router.post("/conversations", response_model=StartConversationResponse)
async def start_conversation(
    req: MessageRequest,
    db: AsyncSession = Depends(get_db),
    assistant: Assistant = Depends(get_assistant),
):
    conversation = await create_conversation(db, _require_text(req.message))

    title, reply = await asyncio.gather(
        assistant.title(conversation),
        assistant.reply(conversation),
        return_exceptions=True,
    )

    if isinstance(reply, ChatError):
        logger.error(f"[{conversation.id}] Reply failed: {reply}")
        raise _http_error(reply)
    if isinstance(reply, BaseException):
        raise reply

    if isinstance(title, ChatError):
        logger.warning(f"[{conversation.id}] Title generation failed, using fallback: {title}")
        title = UNTITLED
    elif isinstance(title, BaseException):
        raise title

    await set_title(db, conversation, title)
    await append_message(db, conversation, "assistant", reply)
    return StartConversationResponse(conversation_id=conversation.id, title=title, reply=reply)


@router.post("/conversations/{conversation_id}/messages", response_model=ContinueConversationResponse)
async def continue_conversation(
    conversation_id: str,
    req: MessageRequest,
    db: AsyncSession = Depends(get_db),
    assistant: Assistant = Depends(get_assistant),
):
    conversation = await _load(db, conversation_id)
    await append_message(db, conversation, "user", _require_text(req.message))

    try:
        reply = await assistant.reply(conversation)
    except ChatError as e:
        logger.error(f"[{conversation.id}] Reply failed: {e}")
        raise _http_error(e)

    await append_message(db, conversation, "assistant", reply)
    return ContinueConversationResponse(reply=reply)


@router.get("/conversations", response_model=List[ConversationSummary])
async def list_all(db: AsyncSession = Depends(get_db)):
    return await list_conversations(db)


@router.get("/conversations/{conversation_id}", response_model=ConversationOut)
async def describe_conversation(conversation_id: str, db: AsyncSession = Depends(get_db)):
    return await _load(db, conversation_id)
