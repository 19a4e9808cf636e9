"""
Text-based interview session interface.

Provides a command-line interface for running a timed coding interview
session in the terminal. The countdown advances by the wall-clock time
spent between inputs.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from talent_match.interview.integrity import count_by_severity
from talent_match.interview.orchestrator import InterviewSessionOrchestrator
from talent_match.interview.schemas import EventOutcome, SessionEvent, SessionResult, Severity

HELP_TEXT = """Commands:
  <code line>      append a line to your solution
  :paste           paste a block (end with a blank line)
  :explain TEXT    add to your explanation
  :away / :back    leave / return to the interview tab
  :record          start or stop voice recording
  :next            move to the next phase
  :status          show timer, phase and integrity
  :help            show this help
  :quit            end the session"""


def format_result(result: SessionResult) -> str:
    """
    Render a session result as a plain-text integrity report.

    Args:
        result: Finished session.

    Returns:
        Multi-line report.
    """
    counts = count_by_severity(result.flags)

    lines = [
        "=" * 60,
        "Session Summary",
        "=" * 60,
        f"Challenge: {result.challenge.title}",
        f"Session: {result.session_id}",
        f"Phases completed: {result.phases_completed}/{result.challenge.total_phases}",
        f"Time used: {result.time_taken_seconds // 60}:{result.time_taken_seconds % 60:02d}",
        f"Integrity: {result.integrity_score * 100:.0f}%",
        f"Flags: {len(result.flags)} (high {counts[Severity.HIGH]}, "
        f"medium {counts[Severity.MEDIUM]}, low {counts[Severity.LOW]})",
        f"Paste attempts: {result.paste_attempts}",
    ]

    for flag in result.flags:
        lines.append(f"  - [{flag.severity.value}] {flag.flag_type.value}: {flag.description}")

    if result.surprise_answer:
        lines.append(f"Surprise answer: {result.surprise_answer}")

    if result.analysis is not None:
        lines.append(f"Reviewer score: {result.analysis.score:.2f}")
        for item in result.analysis.flags:
            lines.append(f"  ! {item}")
        for item in result.analysis.recommendations:
            lines.append(f"  > {item}")

    lines.append("=" * 60)
    return "\n".join(lines)


class SessionInterface(ABC):
    """Abstract base class for session interfaces."""

    @abstractmethod
    async def run(self) -> SessionResult | None:
        """Run the session interface."""
        ...

    @abstractmethod
    async def send_message(self, message: str) -> None:
        """
        Send a message to the candidate.

        Args:
            message: Message to display.
        """
        ...

    @abstractmethod
    async def receive_input(self) -> str:
        """
        Receive input from the candidate.

        Returns:
            Candidate's input string.
        """
        ...


class TextInterface(SessionInterface):
    """
    Command-line text interface for interview sessions.

    Provides a simple REPL: plain lines are code, colon commands are
    session actions.
    """

    def __init__(
        self,
        orchestrator: InterviewSessionOrchestrator,
        skills: list[str] | None = None,
        requirements: list[str] | None = None,
        generate_challenge: bool = True,
        input_func: Callable[[str], str] = input,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the text interface.

        Args:
            orchestrator: Session orchestrator to use.
            skills: Candidate skills for challenge generation.
            requirements: Job requirements for challenge generation.
            generate_challenge: Whether to ask the model for a challenge.
            input_func: Line reader.
            clock: Monotonic clock in seconds.
        """
        self._orchestrator = orchestrator
        self._skills = skills or []
        self._requirements = requirements or []
        self._generate_challenge = generate_challenge
        self._input_func = input_func
        self._clock = clock
        self._last_input_at: float = 0.0
        self._carry: float = 0.0

    async def run(self) -> SessionResult | None:
        """Run the interactive session."""
        print("\n" + "=" * 60)
        print("Welcome to the Talent Match Interview Session")
        print("=" * 60 + "\n")

        challenge = await self._orchestrator.start_session(
            self._skills,
            self._requirements,
            generate=self._generate_challenge,
        )
        await self.send_message(
            f"{challenge.title}\n{challenge.description}\n\n{challenge.problem_statement.strip()}\n\n"
            f"Time limit: {challenge.time_limit_minutes} minutes. "
            f"Phase 1 of {challenge.total_phases}."
        )
        print(HELP_TEXT)
        self._last_input_at = self._clock()

        while self._orchestrator.is_active:
            line = await self.receive_input()
            if not await self._advance_clock():
                break

            command, _, argument = line.strip().partition(" ")
            if command in (":quit", ":exit"):
                break
            await self._handle(line, command, argument)

        if not self._orchestrator.is_active:
            return None

        print("\nEnding session...")
        result = await self._orchestrator.end_session()
        await self.send_message(format_result(result))
        return result

    async def _advance_clock(self) -> bool:
        """
        Tick the timer by the time spent since the previous input.

        Returns:
            False once the timer has run out.
        """
        now = self._clock()
        elapsed = now - self._last_input_at + self._carry
        self._last_input_at = now
        seconds = int(elapsed)
        self._carry = elapsed - seconds

        outcome = self._orchestrator.apply_event(SessionEvent(kind="tick", seconds=seconds))
        if outcome.surprise_question:
            await self.send_message(f"Surprise question: {outcome.surprise_question}")
            answer = await self._get_input("Answer: ")
            self._orchestrator.answer_surprise_question("" if answer == ":quit" else answer)

        state = self._orchestrator.current_state
        if state is not None and state.is_expired():
            await self.send_message("Time is up.")
            return False
        return True

    async def _handle(self, line: str, command: str, argument: str) -> None:
        state = self._orchestrator.current_state
        if state is None:
            return

        if command == ":help":
            print(HELP_TEXT)
        elif command == ":status":
            await self.send_message(
                f"Time remaining: {state.format_time()}{' (low)' if state.is_low_time() else ''} | "
                f"Phase {state.current_phase} of {state.total_phases} | "
                f"{'Active' if state.tab_active else 'Tab Inactive'} | "
                f"Integrity: {state.integrity_score * 100:.0f}% | "
                f"{len(state.flags)} flag(s)"
            )
        elif command == ":away":
            self._report(self._orchestrator.apply_event(SessionEvent(kind="visibility", hidden=True)))
        elif command == ":back":
            self._report(self._orchestrator.apply_event(SessionEvent(kind="visibility", hidden=False)))
        elif command == ":record":
            recording = state.toggle_recording()
            await self.send_message("Recording started." if recording else "Recording stopped.")
        elif command == ":next":
            outcome = self._orchestrator.apply_event(SessionEvent(kind="next_phase"))
            if outcome.phase is None:
                await self.send_message("Already on the last phase.")
            else:
                await self.send_message(f"Phase {outcome.phase} of {state.total_phases}.")
        elif command == ":explain":
            text = f"{state.explanation} {argument}".strip()
            self._report(self._orchestrator.apply_event(SessionEvent(kind="explanation", text=text)))
        elif command == ":paste":
            block = await self._read_block()
            self._report(self._orchestrator.apply_event(SessionEvent(kind="paste", text=block, target="code")))
            self._report(self._orchestrator.apply_event(SessionEvent(kind="code", text=state.code + block)))
        else:
            self._report(self._orchestrator.apply_event(SessionEvent(kind="code", text=state.code + line + "\n")))

    def _report(self, outcome: EventOutcome) -> None:
        if outcome.notice:
            print(f"[!] {outcome.notice}")
        if outcome.flag is not None:
            print(f"[flag] {outcome.flag.description}")

    async def _read_block(self) -> str:
        lines: list[str] = []
        while True:
            line = await self._get_input("")
            if not line.strip():
                break
            lines.append(line)
        return "\n".join(lines) + ("\n" if lines else "")

    async def send_message(self, message: str) -> None:
        """
        Display a message to the terminal.

        Args:
            message: Message to display.
        """
        print(f"\n{message}\n")

    async def receive_input(self) -> str:
        """
        Get input from the terminal.

        Returns:
            Candidate's input string.
        """
        return await self._get_input("> ")

    async def _get_input(self, prompt: str) -> str:
        """
        Get input with a specific prompt.

        Args:
            prompt: Prompt to display.

        Returns:
            Candidate's input; ":quit" at end of input.
        """
        try:
            return self._input_func(prompt)
        except EOFError:
            return ":quit"
