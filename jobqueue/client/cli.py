"""
Command line client for the job queue.

Usage:
    jobqueue create --payload "resize image 42"
    jobqueue list
    jobqueue claim [--wait --interval 1 --timeout 30]
    jobqueue claim-id --id 7
"""

import sys
import time

import click

from jobqueue.client.http import QueueClient, QueueClientError
from jobqueue.config import get_settings
from jobqueue.constants import JobStatus
from jobqueue.observability.logging import setup_logging
from jobqueue.types.api import JobResponse


def _format_job(job: JobResponse) -> str:
    return (
        f"ID: {job.id}, Status: {job.status.value}, "
        f"Payload: {job.payload}, Timestamp: {job.timestamp.isoformat()}"
    )


@click.group(help="jobqueue: durable job queue client")
@click.option(
    "--url",
    "base_url",
    default=None,
    help="Base URL of the queue API (defaults to API_BASE_URL).",
)
@click.pass_context
def cli(ctx: click.Context, base_url: str | None):
    setup_logging(level="WARNING", log_format="console", stream=sys.stderr)
    if ctx.obj is None:
        settings = get_settings()
        ctx.obj = QueueClient(
            base_url=base_url or settings.api_base_url,
            timeout=settings.client_timeout_seconds,
        )
        ctx.call_on_close(ctx.obj.close)


@cli.command("create", help="Add a new job to the queue")
@click.option(
    "--status",
    type=click.Choice([s.value for s in JobStatus]),
    default=JobStatus.AVAILABLE.value,
    show_default=True,
    help="Initial status of the job",
)
@click.option("--payload", required=True, help="Payload of the job")
@click.pass_obj
def create_cmd(client: QueueClient, status: str, payload: str):
    try:
        job = client.create_job(payload=payload, status=status)
    except QueueClientError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created job - {_format_job(job)}")


@cli.command("list", help="List all jobs")
@click.pass_obj
def list_cmd(client: QueueClient):
    try:
        jobs = client.list_jobs()
    except QueueClientError as e:
        raise click.ClickException(str(e)) from e
    if not jobs:
        click.echo("No jobs.")
        return
    for job in jobs:
        click.echo(_format_job(job))


@cli.command("claim", help="Claim the next available job")
@click.option("--wait", is_flag=True, help="Poll until a job becomes available")
@click.option(
    "--interval",
    default=1.0,
    type=float,
    show_default=True,
    help="Seconds between polls with --wait",
)
@click.option(
    "--timeout",
    default=None,
    type=float,
    help="Give up waiting after this many seconds",
)
@click.pass_obj
def claim_cmd(client: QueueClient, wait: bool, interval: float, timeout: float | None):
    deadline = None if timeout is None else time.monotonic() + timeout
    try:
        while True:
            job = client.claim_job()
            if job is not None or not wait:
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            time.sleep(interval)
    except QueueClientError as e:
        raise click.ClickException(str(e)) from e

    if job is None:
        click.echo("No available jobs.")
        return
    click.echo(f"Claimed job - {_format_job(job)}")


@cli.command("claim-id", help="Claim a specific job by id")
@click.option("--id", "job_id", required=True, type=click.IntRange(min=1), help="ID of the job to claim")
@click.pass_obj
def claim_id_cmd(client: QueueClient, job_id: int):
    try:
        job = client.claim_job_by_id(job_id)
    except QueueClientError as e:
        raise click.ClickException(str(e)) from e

    if job is None:
        click.echo(f"Job {job_id} not found or not available.")
        return
    click.echo(f"Claimed job - {_format_job(job)}")


if __name__ == "__main__":
    cli()
