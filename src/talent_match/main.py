"""
Main entry point for the Talent Match application.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from uuid import UUID

from talent_match.config import get_settings
from talent_match.db.repository import CandidateRepository, JobRepository
from talent_match.db.session import get_engine, get_session_factory
from talent_match.interview.orchestrator import InterviewSessionOrchestrator
from talent_match.io.replay import load_events, replay_events
from talent_match.io.text_interface import TextInterface, format_result
from talent_match.matching.ranking import CandidateRanker
from talent_match.matching.schemas import CandidateRecord, JobPosting
from talent_match.matching.similarity import similarity_to_percentage
from talent_match.models.llm_client import LLMClient
from talent_match.services.matching_service import MatchingService

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _split_list(value: str | None) -> list[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="talent-match",
        description="Candidate matching and interview integrity tooling",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    session = subparsers.add_parser("session", help="Run an interactive interview session")
    session.add_argument("--skills", default="", help="Comma-separated candidate skills")
    session.add_argument("--requirements", default="", help="Comma-separated job requirements")
    session.add_argument(
        "--no-generate",
        action="store_true",
        help="Use the built-in challenge instead of generating one",
    )

    replay = subparsers.add_parser("replay", help="Replay recorded session events")
    replay.add_argument("file", type=Path, help="JSON file with session events")
    replay.add_argument("--analyze", action="store_true", help="Run the model integrity review")
    replay.add_argument("--json", action="store_true", help="Print the result as JSON")

    rank = subparsers.add_parser("rank", help="Rank the candidate pool for a job")
    rank.add_argument("--job-id", type=UUID, required=True, help="Job UUID")
    rank.add_argument("--limit", type=int, default=20, help="Number of candidates to show")

    score = subparsers.add_parser("score", help="Score one candidate against one job")
    score.add_argument("--candidate", type=Path, required=True, help="Candidate JSON file")
    score.add_argument("--job", type=Path, required=True, help="Job JSON file")
    score.add_argument(
        "--embed",
        action="store_true",
        help="Compute missing embeddings with the inference API",
    )

    return parser


async def run_session(args: argparse.Namespace) -> None:
    """Run an interactive interview session."""
    llm_client = LLMClient()
    try:
        orchestrator = InterviewSessionOrchestrator(llm_client=llm_client)
        interface = TextInterface(
            orchestrator,
            skills=_split_list(args.skills),
            requirements=_split_list(args.requirements),
            generate_challenge=not args.no_generate,
        )
        logger.info("Starting interview session...")
        await interface.run()
    finally:
        await llm_client.close()


async def run_replay(args: argparse.Namespace) -> None:
    """Replay recorded events and print the integrity report."""
    events = load_events(args.file)
    llm_client = LLMClient()
    try:
        orchestrator = InterviewSessionOrchestrator(llm_client=llm_client)
        result = await replay_events(orchestrator, events, analyze=args.analyze)
    finally:
        await llm_client.close()

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_result(result))


async def run_rank(args: argparse.Namespace) -> None:
    """Rank the stored candidate pool for a job."""
    llm_client = LLMClient()
    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            service = MatchingService(
                candidate_repository=CandidateRepository(session),
                job_repository=JobRepository(session),
                llm_client=llm_client,
            )
            ranked = await service.rank_candidates_for_job(args.job_id)
    finally:
        await llm_client.close()
        await get_engine().dispose()

    for position, entry in enumerate(ranked[: args.limit], start=1):
        candidate = entry.candidate
        print(
            f"{position:>3}. {entry.ai_match_score * 100:5.1f}%  {candidate.full_name} <{candidate.email}>  "
            f"{candidate.experience_years if candidate.experience_years is not None else '?'}y  "
            f"{', '.join(candidate.skill_names[:5])}"
        )


async def run_score(args: argparse.Namespace) -> None:
    """Score a candidate/job pair from JSON files."""
    candidate = CandidateRecord.model_validate_json(args.candidate.read_text(encoding="utf-8"))
    job = JobPosting.model_validate_json(args.job.read_text(encoding="utf-8"))

    if args.embed and (not candidate.embedding or not job.embedding):
        llm_client = LLMClient()
        try:
            if not candidate.embedding:
                candidate.embedding = await llm_client.embed(candidate.embedding_text())
            if not job.embedding:
                job.embedding = await llm_client.embed(job.embedding_text())
        finally:
            await llm_client.close()

    ranked = CandidateRanker().score(candidate, job)
    output = {
        "candidate_id": str(candidate.candidate_id),
        "job_id": str(job.job_id),
        "ai_match_score": ranked.ai_match_score,
    }
    if ranked.breakdown is not None:
        output["breakdown"] = ranked.breakdown.model_dump()
        output["similarity_percentage"] = similarity_to_percentage(ranked.breakdown.similarity)
    print(json.dumps(output, indent=2))


COMMANDS = {
    "session": run_session,
    "replay": run_replay,
    "rank": run_rank,
    "score": run_score,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        asyncio.run(COMMANDS[args.command](args))
    except KeyboardInterrupt:
        print("\nSession terminated by user.")
        sys.exit(0)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        sys.exit(2)
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
