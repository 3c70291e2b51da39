# intent_capture/pipeline/post_call.py
"""Post-call ingestion: transcript -> session -> analyzed, attributed intents."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from ..config import Config
from ..database.models import CapturedIntent, Intent, Session, TranscriptTurn
from ..exceptions import public_message
from ..integrations.manager import StoreManager
from ..nlu.call_analyzer import CallAnalyzer
from ..utils.revenue import attribute_value

logger = logging.getLogger(__name__)

TRANSCRIPT_EVENT = "post_call_transcription"

def extract_transcript_turns(transcript: List[Any]) -> List[TranscriptTurn]:
    """Keep user/agent turns with non-empty text; drop everything else."""
    turns = []
    for entry in transcript:
        if not isinstance(entry, dict):
            continue
        role = entry.get("role")
        message = entry.get("message")
        if role not in ("user", "agent") or not isinstance(message, str) or not message.strip():
            continue
        turns.append(TranscriptTurn(role=role, message=message.strip()))
    return turns

def resolve_merchant_id(metadata: Any, default_merchant_id: str) -> str:
    if isinstance(metadata, dict):
        merchant_id = metadata.get("merchantId") or metadata.get("merchant_id")
        if isinstance(merchant_id, str) and merchant_id.strip():
            return merchant_id.strip()
    return default_merchant_id

async def _attribute_intent(store_manager: StoreManager, merchant_id: str,
                            intent: CapturedIntent) -> Dict[str, Any]:
    """Price lookup plus revenue/opportunity-cost figures for one intent."""
    price = await asyncio.to_thread(store_manager.get_product_price, merchant_id, intent.product_id)

    similar_price = None
    if intent.outcome == "rejected" and intent.rejection_reason == "product_not_found" and intent.category:
        similar_price = await asyncio.to_thread(store_manager.estimate_similar_price, merchant_id, intent.category)

    return attribute_value(
        outcome=intent.outcome,
        intent_type=intent.intent_type,
        confidence=intent.confidence,
        rejection_reason=intent.rejection_reason,
        price=price,
        customer_price_expectation=intent.customer_price_expectation,
        estimated_similar_price=similar_price
    )

async def _resolve_product_ids(store_manager: StoreManager, merchant_id: str,
                               intents: List[CapturedIntent]) -> List[CapturedIntent]:
    """Fill productId by case-insensitive name lookup where the analysis left it empty."""
    unresolved = [i for i in intents if i.product_id is None and i.product_name]
    if not unresolved:
        return intents

    name_index = await asyncio.to_thread(store_manager.product_name_index, merchant_id)
    resolved = []
    for intent in intents:
        if intent.product_id is None and intent.product_name:
            product_id = name_index.get(intent.product_name.lower())
            if product_id:
                intent = intent.model_copy(update={"product_id": product_id})
        resolved.append(intent)
    return resolved

async def process_post_call(payload: Any, config: Config, store_manager: StoreManager,
                            analyzer: CallAnalyzer) -> Tuple[int, Dict[str, Any]]:
    """Handle a verified webhook payload; returns (status code, JSON body)."""

    if not isinstance(payload, dict) or not payload.get("type"):
        return 400, {
            "error": "Invalid payload",
            "message": "Payload must include a 'type' field"
        }

    event_type = payload["type"]
    if event_type != TRANSCRIPT_EVENT:
        logger.info(f"Ignoring webhook event type '{event_type}'")
        return 200, {"message": "Webhook received, not processed", "type": event_type}

    data = payload.get("data")
    if not isinstance(data, dict):
        data = {}

    transcript = data.get("transcript")
    if not isinstance(transcript, list) or len(transcript) == 0:
        return 400, {"error": "Empty or invalid transcript"}

    conversation_id = data.get("conversation_id")
    if not isinstance(conversation_id, str) or not conversation_id.strip():
        return 400, {"error": "Invalid payload", "message": "Payload must include a 'conversation_id'"}

    try:
        structured_transcript = extract_transcript_turns(transcript)
        user_utterances = [turn.message for turn in structured_transcript if turn.role == "user"]

        if not user_utterances:
            return 200, {
                "message": "No user utterances to process",
                "conversationId": conversation_id,
                "intentsProcessed": 0
            }

        merchant_id = resolve_merchant_id(data.get("metadata"), config.DEFAULT_MERCHANT_ID)
        agent_id: Optional[str] = data.get("agent_id") if isinstance(data.get("agent_id"), str) else None

        # Read-then-write without a lock: concurrent duplicate deliveries may both create the session
        existing_session = await asyncio.to_thread(store_manager.get_session, merchant_id, conversation_id)
        if existing_session is None:
            await asyncio.to_thread(store_manager.create_session, Session(
                session_id=conversation_id,
                merchant_id=merchant_id,
                agent_id=agent_id,
                conversation_id=conversation_id,
                transcript=structured_transcript,
                raw_text=". ".join(user_utterances),
                timestamp=datetime.now(timezone.utc)
            ))
            logger.info(f"Created session {conversation_id} for merchant '{merchant_id}'")
        else:
            logger.info(f"Session {conversation_id} already exists, skipping session write")

        merchant_metadata = await asyncio.to_thread(store_manager.get_merchant_metadata, merchant_id)
        analysis = await analyzer.analyze(structured_transcript, merchant_id, merchant_metadata)
        captured = await _resolve_product_ids(store_manager, merchant_id, analysis.intents)

        attributions = await asyncio.gather(
            *(_attribute_intent(store_manager, merchant_id, intent) for intent in captured)
        )

        intent_ids = []
        for intent, attribution in zip(captured, attributions):
            record = Intent(
                **intent.model_dump(),
                **attribution,
                intent_id=uuid.uuid4().hex,
                session_id=conversation_id,
                merchant_id=merchant_id,
                timestamp=datetime.now(timezone.utc)
            )
            intent_ids.append(await asyncio.to_thread(store_manager.create_intent, record))

        logger.info(f"Processed conversation {conversation_id}: {len(intent_ids)} intents stored")
        return 200, {
            "message": "Transcript processed successfully",
            "conversationId": conversation_id,
            "sessionId": conversation_id,
            "intentsProcessed": len(intent_ids),
            "intentIds": intent_ids
        }

    except Exception as e:
        logger.error(f"Post-call processing failed for {conversation_id}: {e}")
        return 200, {
            "error": "Processing failed",
            "message": public_message(e, config.is_production)
        }
