"""Service for turning a free-text request into a list of proposed tasks."""

from __future__ import annotations

import json
import logging
import math
import os
import re
import uuid

from todoai.domain.errors import GenerationError
from todoai.domain.models import Task
from todoai.services.timeparse import parse_clock

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "09:00"
DEFAULT_DURATION = 60

_SYSTEM_PROMPT = """\
You are a task planning assistant. Break the user's request into concrete tasks \
for a single day.

Respond with ONLY a JSON array of task objects in this exact format:

[
  {
    "text": "<short task description>",
    "startTime": "<HH:MM in 24-hour format>",
    "duration": <duration in minutes, one of 30, 60, 90, 120 or 180>
  }
]
"""

_HISTORY_PREAMBLE = """\
Use the user's past tasks to suggest realistic times and durations. \
Here is the user's task history: """

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def _complete_with_llm(system_prompt: str, user_prompt: str, model: str) -> str:
    """Call OpenAI and return the raw text of the first choice."""
    from openai import OpenAI

    client = OpenAI(api_key=os.environ["OPENAI_API_KEY"])
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=0.7,
    )
    return response.choices[0].message.content or ""


def _extract_json(content: str) -> list:
    """Pull the JSON array out of a reply, tolerating markdown code fences."""
    m = _FENCE_RE.search(content)
    raw = m.group(1).strip() if m else content.strip()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Model reply is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, list):
        raise GenerationError("Model reply is not a JSON array of tasks")
    return data


def _positive_minutes(value: object) -> int | None:
    """Return *value* as a whole number of minutes above zero, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and value > 0:
        return int(value)
    return None


def _normalize(item: object, date: str) -> Task:
    if not isinstance(item, dict):
        item = {"text": str(item)}

    text = str(item.get("text") or "").strip() or "Untitled task"
    start_time = parse_clock(item.get("startTime")) or DEFAULT_START_TIME

    duration = _positive_minutes(item.get("duration")) or DEFAULT_DURATION

    return Task(
        id=str(uuid.uuid4()),
        text=text,
        date=date,
        start_time=start_time,
        duration=duration,
        completed=False,
    )


def _history_lines(history: list[Task]) -> str:
    return json.dumps(
        [
            {"text": t.text, "date": t.date, "startTime": t.start_time, "duration": t.duration}
            for t in history
        ]
    )


def generate_tasks(
    prompt: str,
    date: str,
    history: list[Task] | None = None,
    model: str = "gpt-4o-mini",
) -> list[Task]:
    """Ask the language model for tasks and normalize them onto *date*.

    Missing or unparseable start times fall back to 09:00 and durations to
    60 minutes. Raises ``GenerationError`` when the reply is not a JSON array.
    Nothing is persisted.
    """
    system_prompt = _SYSTEM_PROMPT
    user_prompt = f"Generate a list of tasks for: {prompt}"
    if history:
        system_prompt = f"{_SYSTEM_PROMPT}\n{_HISTORY_PREAMBLE}{_history_lines(history)}"
        user_prompt = f"Based on my past tasks, {prompt}"

    logger.info("requesting tasks from %s (history=%d)", model, len(history or []))
    content = _complete_with_llm(system_prompt, user_prompt, model)
    try:
        items = _extract_json(content)
    except GenerationError:
        logger.error("could not parse model reply: %.200s", content)
        raise

    return [_normalize(item, date) for item in items]
