import json

import pytest

from talent_match.interview.orchestrator import InterviewSessionOrchestrator
from talent_match.interview.schemas import IntegrityFlagType
from talent_match.io.replay import load_events
from talent_match.io.text_interface import TextInterface
from talent_match.main import build_parser, main


class FakeLLM:
    async def generate(self, prompt, **kwargs):
        return ""

    async def chat_with_json(self, messages, schema=None, temperature=0.2, **kwargs):
        return {"score": 0.4, "flags": ["Large paste"], "recommendations": ["Ask a follow-up on data loading"]}

    async def embed(self, text):
        return [0.0]


def _scripted(values):
    it = iter(values)
    return lambda *args: next(it)


@pytest.mark.asyncio
async def test_text_interface_runs_a_session(capsys: pytest.CaptureFixture[str]) -> None:
    inputs = ["import torch", ":paste", "x" * 60, "", ":away", "The GPU is starved", ":quit"]
    interface = TextInterface(
        InterviewSessionOrchestrator(llm_client=FakeLLM()),
        generate_challenge=False,
        input_func=_scripted(inputs),
        clock=_scripted([0.0, 10.0, 20.0, 1300.0, 1310.0]),
    )

    result = await interface.run()

    assert result is not None
    assert result.code == "import torch\n" + "x" * 60 + "\n"
    assert [f.flag_type for f in result.flags] == [IntegrityFlagType.PASTE_DETECTED, IntegrityFlagType.TAB_SWITCH]
    assert result.surprise_answer == "The GPU is starved"
    assert result.time_taken_seconds == 1310
    assert result.analysis is not None and result.analysis.score == 0.4

    out = capsys.readouterr().out
    assert "Large code pastes are flagged for review" in out
    assert "Surprise question:" in out
    assert "Integrity: 55%" in out
    assert "Flags: 2 (high 1, medium 1, low 0)" in out
    assert "> Ask a follow-up on data loading" in out


@pytest.mark.asyncio
async def test_text_interface_stops_when_time_runs_out(capsys: pytest.CaptureFixture[str]) -> None:
    interface = TextInterface(
        InterviewSessionOrchestrator(llm_client=FakeLLM()),
        generate_challenge=False,
        input_func=_scripted(["print('hi')", ""]),
        clock=_scripted([0.0, 3000.0]),
    )

    result = await interface.run()

    assert result is not None
    assert result.time_taken_seconds == 2700
    assert result.code == ""
    assert "Time is up." in capsys.readouterr().out


def test_parser_subcommands() -> None:
    parser = build_parser()

    args = parser.parse_args(["session", "--skills", "Python, SQL", "--no-generate"])
    assert args.command == "session"
    assert args.no_generate

    args = parser.parse_args(["rank", "--job-id", "6f1c2a57-9a4e-4a3e-9d55-0d9b0c1f2e3a"])
    assert args.limit == 20

    with pytest.raises(SystemExit):
        parser.parse_args(["rank", "--job-id", "not-a-uuid"])


def test_load_events_accepts_wrapped_list(tmp_path) -> None:
    path = tmp_path / "events.json"
    path.write_text(json.dumps({"events": [{"kind": "tick", "seconds": 5}, {"kind": "next_phase"}]}), encoding="utf-8")

    events = load_events(path)

    assert [e.kind for e in events] == ["tick", "next_phase"]


def test_load_events_rejects_bad_event(tmp_path) -> None:
    path = tmp_path / "events.json"
    path.write_text(json.dumps([{"kind": "teleport"}]), encoding="utf-8")

    with pytest.raises(ValueError, match="index 0"):
        load_events(path)


def test_replay_command_prints_report(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    events = [
        {"kind": "code", "text": "model.half()\n"},
        {"kind": "surprise_answer", "text": "ignored, nothing pending"},
        {"kind": "paste", "text": "y" * 200},
        {"kind": "tick", "seconds": 1100},
        {"kind": "surprise_answer", "text": "Mixed precision"},
        {"kind": "next_phase"},
    ]
    path = tmp_path / "session.json"
    path.write_text(json.dumps(events), encoding="utf-8")

    main(["replay", str(path)])

    out = capsys.readouterr().out
    assert "AI Model Optimization Challenge" in out
    assert "Phases completed: 1/3" in out
    assert "Integrity: 70%" in out
    assert "Surprise answer: Mixed precision" in out


def test_replay_command_missing_file_exits_with_usage_error(tmp_path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["replay", str(tmp_path / "missing.json")])

    assert exc_info.value.code == 2


def test_score_command_with_embeddings(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    candidate = tmp_path / "candidate.json"
    job = tmp_path / "job.json"
    candidate.write_text(
        json.dumps({"skills": ["Python", "SQL"], "experience_years": 6, "embedding": [0.6, 0.8]}),
        encoding="utf-8",
    )
    job.write_text(
        json.dumps({"title": "Data Engineer", "requirements": "Python, SQL, 5 years", "embedding": [0.6, 0.8]}),
        encoding="utf-8",
    )

    main(["score", "--candidate", str(candidate), "--job", str(job)])

    out = capsys.readouterr().out
    data = json.loads(out[out.index("{") :])
    assert data["breakdown"]["similarity"] == pytest.approx(1.0)
    assert data["similarity_percentage"] == pytest.approx(100.0)
    assert 0.0 <= data["ai_match_score"] <= 1.0
