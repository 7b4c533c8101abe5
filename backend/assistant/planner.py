"""Ask an Ollama chat model to turn an admin's request into an action plan."""
import json
import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

MAX_ACTIONS = 10

SYSTEM_PROMPT = f"""
You are the administration assistant of a course management system.
Read the admin's message and answer with a single JSON object of this shape:
{{
  "actions": [ ... zero or more actions ... ],
  "reason": "short explanation of the chosen actions"
}}

Available actions:
- update_student: {{"type": "update_student", "username": "<login>", "name"?: "<display name>", "role"?: "STUDENT"|"TEACHER"|"ADMIN"}}
- upsert_weekly_score: {{
    "type": "upsert_weekly_score",
    "studentUsername": "<student login>",
    "courseCode": "<course code>",
    "week": <1-14>,
    "part"?: <1|2>,
    "lectureScore"?: <0-100>,
    "practiceScore"?: <0-100>,
    "individualWorkScore"?: <0-100>,
    "ratingScore"?: <0-100>,
    "midtermScore"?: <0-100>,
    "examScore"?: <0-100>
  }}
- create_test: {{
    "type": "create_test",
    "teacherUsername": "<teacher login>",
    "title": "<test title>",
    "description"?: "<description>",
    "questions"?: [{{"text": "<question>", "options"?: ["A", "B"], "correctIndex"?: <0-based index>}}]
  }}

Rules:
- When a required field is missing, return an empty "actions" list and say what is missing in "reason".
- Use only usernames, course codes and weeks that appear in the message.
- Return at most {MAX_ACTIONS} actions.
- Reply with JSON only, without markdown.
""".strip()

_FENCE = re.compile(r'```(?:json)?', re.IGNORECASE)
_OBJECT = re.compile(r'(\{.*\})', re.DOTALL)


class PlannerError(Exception):
    """The model could not be reached or returned something that is not a plan."""


def parse_plan(raw):
    """Extract ``{"actions": [...], "reason": ...}`` from model output.

    Tolerates markdown fences, text around the object, a bare list of
    actions and a ``{"plan": {...}}`` wrapper. Returns ``None`` if nothing
    usable is found.
    """
    if not raw:
        return None
    cleaned = _FENCE.sub('', str(raw)).strip()
    match = _OBJECT.search(cleaned)
    candidates = [match.group(1), cleaned] if match else [cleaned]
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, list):
            return {'actions': parsed}
        if isinstance(parsed, dict):
            if isinstance(parsed.get('plan'), dict):
                return parsed['plan']
            return parsed
    return None


def request_plan(message):
    """Send the message to the model and return the parsed plan."""
    base_url = settings.OLLAMA_BASE_URL.rstrip('/')
    payload = {
        'model': settings.OLLAMA_ACTION_MODEL,
        'stream': False,
        'format': 'json',
        'messages': [
            {'role': 'system', 'content': SYSTEM_PROMPT},
            {'role': 'user', 'content': message},
        ],
    }
    try:
        response = requests.post(f'{base_url}/api/chat', json=payload, timeout=settings.OLLAMA_TIMEOUT_SECONDS)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning('Planner model call failed: %s', exc)
        raise PlannerError(str(exc)) from exc

    raw = response.text
    try:
        content = response.json().get('message', {}).get('content')
    except (ValueError, AttributeError):
        content = None
    plan = parse_plan(content) if content else None
    if plan is None:
        plan = parse_plan(raw)
    if plan is None:
        logger.warning('Planner model returned no usable plan')
        raise PlannerError('Model output is not a JSON plan.')
    return plan
