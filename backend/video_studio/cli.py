from __future__ import annotations

import argparse
import asyncio
import base64
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .client import StudioClient
from .config import configure_logging, settings
from .jobs import Job, JobStore
from .models import GenerationMode, JobStatus
from .poller import JobPoller

logger = logging.getLogger(__name__)

_STATUS_ICONS = {
    JobStatus.processing: "...",
    JobStatus.completed: "ok",
    JobStatus.failed: "!!",
}


def encode_image(path: Path) -> str:
    """Read an image file and return it as a ``data:`` URL."""
    mime, _ = mimetypes.guess_type(path.name)
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime or 'application/octet-stream'};base64,{payload}"


def render_job(job: Job) -> str:
    line = f"[{_STATUS_ICONS[job.status]:>3}] {job.id} {job.status.value:<10} {job.prompt!r}"
    if job.status is JobStatus.completed:
        line += f" -> {job.result_url}"
    elif job.status is JobStatus.failed:
        line += f" ({job.error})"
    return line


def render_jobs(jobs: Iterable[Job]) -> str:
    lines = [render_job(job) for job in jobs]
    return "\n".join(lines) if lines else "No jobs."


async def run_generate(
    prompts: Sequence[str],
    *,
    mode: GenerationMode,
    image: str | None,
    client: StudioClient,
    interval: float | None = None,
    max_attempts: int | None = None,
) -> list[Job]:
    store = JobStore(on_change=lambda job: logger.info("%s", render_job(job)))
    poller = JobPoller(store, client, interval=interval, max_attempts=max_attempts)
    try:
        await asyncio.gather(*(poller.submit(p, mode=mode, image=image) for p in prompts))
        return await poller.wait_all()
    finally:
        await poller.aclose()


def _cmd_generate(args: argparse.Namespace) -> int:
    prompts = [p for p in args.prompts if p.strip()]
    if not prompts:
        print("Nothing to generate: every prompt is empty.", file=sys.stderr)
        return 2

    image = encode_image(Path(args.image)) if args.image else None
    mode = GenerationMode(args.mode) if args.mode else (
        GenerationMode.image_to_video if image else GenerationMode.text_to_video
    )

    async def _run() -> list[Job]:
        async with StudioClient(args.base_url) as client:
            return await run_generate(prompts, mode=mode, image=image, client=client)

    jobs = asyncio.run(_run())
    print(render_jobs(jobs))
    return 1 if any(job.status is JobStatus.failed for job in jobs) else 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("video_studio.main:app", host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="video-studio", description="Demo video generation service")
    parser.add_argument("--log-level", default=None, help=f"default: {settings.log_level}")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_cmd_serve)

    gen = sub.add_parser("generate", help="submit prompts and wait for the videos")
    gen.add_argument("prompts", nargs="+", metavar="PROMPT")
    gen.add_argument("--mode", choices=[m.value for m in GenerationMode], default=None)
    gen.add_argument("--image", default=None, help="image file for image-to-video")
    gen.add_argument("--base-url", default=settings.api_base_url)
    gen.set_defaults(func=_cmd_generate)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
