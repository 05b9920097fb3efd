"""Gemini-backed chat and summary helpers.

Both helpers always return display text: any failure is logged and turned
into a fallback message so the dashboard keeps working without the API.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Mapping, Optional

import pandas as pd
from google import genai
from google.genai import types

from core.records import COUNTRY, DESCRIPTION, INNOVATION, TYPE_OF_INNOVATION


logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"
CHAT_MODEL = "gemini-2.5-flash"
SUMMARY_MODEL = "gemini-2.5-flash-lite"

MISSING_KEY_CHAT = "System Error: Missing API Key."
MISSING_KEY_SUMMARY = "AI Summary unavailable: Missing API Key."
CONTEXT_NOT_READY = "I'm initializing the data. Please try again in a moment."
CHAT_FALLBACK = "I apologize, but I am unable to process your request at the moment."
SUMMARY_FALLBACK = "Unable to generate AI summary at this time."
NO_MATCHES_SUMMARY = "No innovations match the selected criteria."


def system_instruction(context_data: str) -> str:
    return f"""You are an AI assistant for the CGIAR Multifunctional Landscapes (MFL) platform.
You have access to the following dataset (in JSON format, newline-delimited) describing various agricultural innovations:

{context_data}

The main fields in each record are:
- "Innovation/ Technology/ Tool": Name of the solution/innovation.
- "Type of Innovation / Technology/ Tool": Category (e.g., Technical, Socio-technical, Socio-economic).
- "Scale": The operational scale (e.g., Community, Landscape, Multiscale, National, Plot, Farm).
- "Production system": The agricultural context.
- "Country": Implementation location.
- "Challenge it was addressing": The problem the innovation addresses.
- "Centre (s) involved": The CGIAR center(s) involved.
- "Data collected": Information about what data was gathered.
- "Site": Specific location details.
- "Focal Point": Contact person for the innovation.

Answer user questions based strictly on this data.
- If a user asks for a summary, synthesize the information provided in the data.
- If a user asks about a specific country or innovation, look it up in the data above.
- If the answer is not in the data, state that you don't have that information.
- Keep answers concise and helpful. Format lists clearly.
"""


def get_client(api_key: Optional[str] = None) -> Optional[genai.Client]:
    api_key = api_key or os.environ.get(API_KEY_ENV)
    if not api_key:
        return None
    return genai.Client(api_key=api_key)


def _history_contents(history: Iterable[Mapping[str, str]]) -> list:
    return [
        types.Content(role=turn.get("role", "user"), parts=[types.Part(text=turn.get("text", ""))])
        for turn in history
    ]


def send_chat_message(
    history: Iterable[Mapping[str, str]],
    message: str,
    context_data: str,
    *,
    client: Any = None,
) -> str:
    try:
        client = client or get_client()
        if client is None:
            return MISSING_KEY_CHAT
        if not context_data:
            return CONTEXT_NOT_READY

        chat = client.chats.create(
            model=CHAT_MODEL,
            config=types.GenerateContentConfig(system_instruction=system_instruction(context_data)),
            history=_history_contents(history),
        )
        response = chat.send_message(message)
        return response.text or CHAT_FALLBACK
    except Exception:
        logger.exception("Gemini chat request failed")
        return CHAT_FALLBACK


def summary_prompt(records: pd.DataFrame) -> str:
    lines = [
        f"- {row[INNOVATION]} ({row[TYPE_OF_INNOVATION]}, {row[COUNTRY]}): {row[DESCRIPTION]}"
        for row in records[[INNOVATION, TYPE_OF_INNOVATION, COUNTRY, DESCRIPTION]].to_dict(orient="records")
    ]
    data_context = "\n".join(lines)
    return (
        "Analyze the following list of agricultural innovations and provide a concise 2-3 sentence summary.\n"
        "Focus on the dominant types of technologies, the regional distribution, "
        "and the primary production systems targeted.\n\n"
        f"Data:\n{data_context}\n"
    )


def generate_innovation_summary(records: pd.DataFrame, *, client: Any = None) -> str:
    if records is None or records.empty:
        return NO_MATCHES_SUMMARY
    try:
        client = client or get_client()
        if client is None:
            return MISSING_KEY_SUMMARY
        response = client.models.generate_content(model=SUMMARY_MODEL, contents=summary_prompt(records))
        return response.text or SUMMARY_FALLBACK
    except Exception:
        logger.exception("Summary generation failed")
        return SUMMARY_FALLBACK
