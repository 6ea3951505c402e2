"""
Mock Interview in the Terminal (Text Mode).

Runs a complete interview session against the job/interview backend:
1. Pick a job (search query or a job description file)
2. Answer each question at the prompt (or skip / ask follow-ups)
3. Score answers, request a learning plan and print the results

Prerequisites:
- Job/interview backend reachable at BACKEND_BASE_URL (default http://localhost:8000)

Usage:
    python scripts/run_mock_interview.py --query "python developer"
    python scripts/run_mock_interview.py --description-file jd.txt --title "Backend Engineer"

At the answer prompt:
    <text>          append to the answer
    (empty line)    submit the answer and move on
    /skip           skip the question
    /ask <query>    ask the follow-up assistant about the question
    /quit           stop the interview
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from jobcoach.core.config import get_settings
from jobcoach.core.storage import JsonFileKeyValueStore
from jobcoach.models.jobs import Job, JobSearchParams
from jobcoach.providers.backend import BackendClient
from jobcoach.services.interview_session import InterviewSession, SessionState
from jobcoach.services.response_capture import ResponseCapture
from jobcoach.services.results_view import load_results
from jobcoach.services.scoring_pipeline import ScoringPipeline
from jobcoach.services.speech import SpeechPlayback, TempFileAudioPlayer
from jobcoach.services.state_store import ResultsStore, ResumeStore


def print_separator(title: str, char: str = "="):
    print()
    print(char * 70)
    print(f"  {title}")
    print(char * 70)


def print_question(session: InterviewSession):
    q = session.current_question
    print_separator(
        f"Question {session.index + 1}/{session.question_count} [{q.kind}]"
        f"  total {session.timers.total_display}",
        "-",
    )
    print(q.text)
    if q.coding is not None:
        print(f"\n  Language: {q.coding.target_language}  Difficulty: {q.coding.difficulty}")
        for c in q.coding.constraints:
            print(f"  - {c}")
        for example in q.coding.examples:
            print(f"  e.g. {example}")


def print_results(results: ResultsStore):
    view = load_results(results)
    print_separator("RESULTS")
    if not view.has_results:
        print("No scores were recorded.")
        return
    print(f"Overall: {view.overall_percent:.1f}%")
    for item in view.strengths:
        print(f"  [strong] {item.percent:5.1f}%  {item.text}")
    for item in view.focus_areas:
        print(f"  [focus]  {item.percent:5.1f}%  {item.text}")
    if view.learning_plan is not None:
        print("\nLearning plan saved to the state store (lastLearningPlan).")


async def read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def pick_job(backend: BackendClient, args) -> Job:
    if args.description_file:
        description = Path(args.description_file).read_text(encoding="utf-8")
        return Job(id="local", title=args.title or "Software Engineer", description=description)

    listings = await backend.search_jobs(JobSearchParams(query=args.query or ""))
    if not listings:
        raise SystemExit("No jobs found for that query.")

    jobs = [Job.from_listing(listing) for listing in listings[:10]]
    for i, job in enumerate(jobs, 1):
        remote = " (remote)" if job.remote else ""
        print(f"{i:2}. {job.title} - {job.company} {job.location}{remote}")
    choice = await read_line("Pick a job [1]: ")
    index = int(choice) - 1 if choice.strip().isdigit() else 0
    return jobs[max(0, min(index, len(jobs) - 1))]


async def answer_loop(session: InterviewSession):
    while session.state == SessionState.READY:
        print_question(session)
        index = session.index
        lines = []
        while True:
            line = await read_line("> ")
            if session.index != index or session.state != SessionState.READY:
                print("(Question timed out and was skipped.)")
                break
            if line.strip() == "/quit":
                return
            if line.strip() == "/skip":
                await session.skip()
                break
            if line.startswith("/ask "):
                assistant = session.follow_up or session.open_follow_up()
                reply = await assistant.send(line[len("/ask "):])
                if reply is not None:
                    print(f"  coach: {reply.content}")
                continue
            if not line.strip():
                if session.current_question.is_coding:
                    session.set_code("\n".join(lines))
                else:
                    session.set_answer("\n".join(lines))
                await session.advance()
                break
            lines.append(line)


async def run(args) -> int:
    settings = get_settings()
    store = JsonFileKeyValueStore(args.state or settings.state_store_path)
    results = ResultsStore(store)
    backend = BackendClient(base_url=args.backend)
    speech = SpeechPlayback(backend, TempFileAudioPlayer()) if args.speak else None

    job = await pick_job(backend, args)
    print_separator(f"Interview: {job.title}")

    session = InterviewSession(
        job=job,
        provider=backend,
        pipeline=ScoringPipeline(backend, results),
        capture=ResponseCapture(backend),
        resume_text=ResumeStore(store).resume_text(),
        difficulty=args.difficulty,
        speech=speech,
        guide_service=backend,
    )

    try:
        await session.load()
        if session.state == SessionState.ERROR:
            print(f"Could not load questions: {session.error}")
            return 1
        session.mount(drive_clock=not args.no_timer)
        await answer_loop(session)
        if session.state == SessionState.COMPLETE:
            print_results(results)
        return 0
    finally:
        await session.close()
        await backend.close()


def main():
    parser = argparse.ArgumentParser(description="Run a mock interview in the terminal")
    parser.add_argument("--query", help="Job search query")
    parser.add_argument("--description-file", help="Use a local job description instead of searching")
    parser.add_argument("--title", help="Job title when using --description-file")
    parser.add_argument("--difficulty", default="medium", choices=["easy", "medium", "hard"])
    parser.add_argument("--backend", help="Backend base URL")
    parser.add_argument("--state", help="Path of the JSON state file")
    parser.add_argument("--speak", action="store_true", help="Synthesize questions and replies to audio files")
    parser.add_argument("--no-timer", action="store_true", help="Disable the inactivity auto-skip")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
