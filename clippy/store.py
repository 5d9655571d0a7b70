"""Conversation store — create, load and append to persisted conversations."""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Conversation, Message, utcnow

logger = logging.getLogger(__name__)


async def create_conversation(db: AsyncSession, content: str, role: str = "user") -> Conversation:
    """Start a conversation whose first message is ``content``."""
    conversation = Conversation(messages=[Message(role=role, content=content)])
    db.add(conversation)
    await db.commit()
    logger.info(f"[{conversation.id}] Conversation created")
    return conversation


async def get_conversation(db: AsyncSession, conversation_id: str) -> Optional[Conversation]:
    return await db.get(Conversation, conversation_id)


async def list_conversations(db: AsyncSession) -> List[Conversation]:
    result = await db.execute(select(Conversation).order_by(Conversation.created_at.desc()))
    return list(result.scalars().all())


async def append_message(db: AsyncSession, conversation: Conversation, role: str, content: str) -> Message:
    message = Message(role=role, content=content)
    conversation.messages.append(message)
    conversation.updated_at = utcnow()
    await db.commit()
    logger.info(f"[{conversation.id}] Appended {role} message ({len(content)} chars)")
    return message


async def set_title(db: AsyncSession, conversation: Conversation, title: str):
    conversation.title = title
    await db.commit()
