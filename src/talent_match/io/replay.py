"""
Offline replay of recorded session events.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from talent_match.interview.orchestrator import InterviewSessionOrchestrator
from talent_match.interview.schemas import SessionEvent, SessionResult

logger = logging.getLogger(__name__)


def load_events(path: str | Path) -> list[SessionEvent]:
    """
    Load session events from a JSON file.

    The file holds either a list of events or an object with an "events"
    list.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or an event is malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Events file not found: {file_path}")

    try:
        data: Any = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Events file is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise ValueError("Events file must contain a list of events")

    events: list[SessionEvent] = []
    for i, item in enumerate(data):
        try:
            events.append(SessionEvent.model_validate(item))
        except ValidationError as e:
            raise ValueError(f"Invalid event at index {i}: {e}") from e
    return events


async def replay_events(
    orchestrator: InterviewSessionOrchestrator,
    events: list[SessionEvent],
    analyze: bool = False,
) -> SessionResult:
    """
    Run recorded events through a fresh session with the built-in challenge.

    Surprise questions are answered by the next surprise_answer event; one
    that is never answered stays unanswered.

    Args:
        orchestrator: Session orchestrator.
        events: Events in the order they occurred.
        analyze: Whether to run the model integrity review at the end.

    Returns:
        The session result.
    """
    await orchestrator.start_session(generate=False)

    for event in events:
        state = orchestrator.current_state
        if state is None or state.is_expired():
            logger.info("Timer expired, ignoring remaining events")
            break
        if event.kind == "surprise_answer" and not state.surprise_question_pending:
            logger.warning("Ignoring surprise answer with no pending question")
            continue
        orchestrator.apply_event(event)

    logger.info(f"Replayed {len(events)} events")
    return await orchestrator.end_session(analyze=analyze)
