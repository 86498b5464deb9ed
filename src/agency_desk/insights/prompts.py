"""Prompt text for AI report summaries."""

import json
from typing import Any

PROMPT_SUFFIX = (
    "Keep your response concise, insightful, and directly address the prompt. "
    "Format the key points as a bulleted list using '•'."
)

DEFAULT_PROMPTS: dict[str, str] = {
    "daily": (
        "Summarize today's activity for the gaming agency, highlighting recharge volume, "
        "the strongest pages, platforms and referral codes"
    ),
    "monthly": (
        "Summarize this month's performance, covering total recharge, the freeplay ratio, "
        "payment method usage and the platforms with the most points loaded"
    ),
    "referral": (
        "Analyze the performance of this referral code, including player volume, average "
        "recharge, preferred platforms and how it compares with the second code if present"
    ),
    "progress": (
        "Evaluate agent performance for this period, naming the top performers and any "
        "agents who need support"
    ),
}


def build_prompt(prompt: str, context: dict[str, Any]) -> str:
    """Combine a prompt with its JSON context into the text sent to the model."""
    data = json.dumps(context, default=str)
    return f"{prompt}. Here is the relevant data in JSON format: {data}. {PROMPT_SUFFIX}"


def format_summary(text: str) -> str:
    """Turn markdown bullets in a model reply into '•' bullets."""
    return text.replace("*", "•").strip()
