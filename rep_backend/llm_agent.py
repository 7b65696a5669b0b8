# rep_backend/llm_agent.py   pure llm, no dummy logic

import os
import json
import logging
from functools import lru_cache
from typing import Dict, Optional
import dotenv
dotenv.load_dotenv()

from langchain_groq import ChatGroq
from langchain_core.messages import SystemMessage, HumanMessage

logger = logging.getLogger(__name__)

GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")


@lru_cache(maxsize=1)
def get_llm() -> ChatGroq:
    # Built on first use so the service starts without a key
    return ChatGroq(
        api_key=os.getenv("GROQ_API_KEY"),
        model=GROQ_MODEL,
        temperature=0.2,
        max_retries=1,
        timeout=1.5,
    )


SYSTEM_PROMPT = (
    "You are a real-time push-up coach voice inside a rep-tracking app.\n\n"
    "Your job: for EACH rep, give super short, clear voice feedback that feels like a "
    "professional trainer talking directly to the user.\n\n"
    "Important style rules:\n"
    "- Sound confident, supportive and energetic.\n"
    "- Talk directly to the user as \"you\".\n"
    "- Keep the message VERY short: ideally 5-10 words, never more than 12.\n"
    "- No emojis, no hashtags, no extra punctuation.\n"
    "- Never mention JSON, fields, data, or that you are an AI.\n\n"
    "You receive numeric data for a SINGLE rep.\n"
    "You MUST respond with a SINGLE JSON object ONLY, no commentary, no markdown.\n\n"
    "JSON format:\n"
    "{\n"
    '  \"exercise\": string,          // exercise name\n'
    '  \"main_issue\": string | null, // e.g. \"shallow_depth\", \"rushed_rep\" or null\n'
    '  \"severity\": \"none\" | \"low\" | \"medium\" | \"high\",\n'
    '  \"message\": string            // short spoken feedback\n'
    "}\n\n"
    "Signals you get in the rep JSON:\n"
    "- exercise_hint: pushup, squat, bicep_curl\n"
    "- variation: standard, wide, diamond, incline, decline\n"
    "- duration_s: rep time in seconds\n"
    "- min_angle: smallest joint angle in the rep (degrees, 180 = straight)\n"
    "- max_angle: largest joint angle in the rep\n"
    "- frames: number of tracked frames in the rep\n\n"
    "Guidelines for feedback:\n"
    "- If form is good -> severity=\"none\" and a short reinforcement.\n"
    "- If min_angle > 80 -> mention going lower.\n"
    "- If max_angle < 170 -> mention locking out at the top.\n"
    "- If duration_s < 0.8 -> mention slowing down and controlling the rep.\n"
)


def _parse_llm_json(raw: str) -> Optional[Dict]:
    """Extract JSON from raw LLM output."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:].strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        s = text.index("{")
        e = text.rindex("}") + 1
        return json.loads(text[s:e])
    except (ValueError, json.JSONDecodeError):
        return None


def analyze_rep_with_llm(rep_summary: Dict) -> Optional[Dict]:
    """
    Calls the Groq LLM and returns the parsed JSON dict.
    If the LLM fails for ANY reason -> return None (NO fallback coaching).
    """
    exercise = rep_summary.get("exercise_hint") or "pushup"
    variation = rep_summary.get("variation") or "standard"

    messages = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(
            content=(
                f"Exercise: {exercise}\n"
                f"Variation: {variation}\n"
                f"Rep JSON: {json.dumps(rep_summary, ensure_ascii=False)}"
            )
        )
    ]

    try:
        resp = get_llm().invoke(messages)
    except Exception:
        logger.exception("LLM call failed")
        return None

    raw = resp.content if hasattr(resp, "content") else str(resp)
    parsed = _parse_llm_json(raw)
    if not parsed:
        logger.warning("Could not parse LLM JSON. Raw: %s", raw)
        return None
    parsed.setdefault("exercise", exercise)
    return parsed
