# covergen/lib/cloud_tasks.py
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from google.cloud import tasks_v2
from google.protobuf import timestamp_pb2

from covergen.config import config
from covergen.logger import get_logger

log = get_logger(__name__)

# a multi-platform job can run several image generations back to back
DISPATCH_DEADLINE_SECONDS = 900


def worker_url(job_id: str) -> str:
    return f"{config.public_base_url}/api/tasks/worker/generate/{job_id}"


def enqueue_generation(job_id: str, payload: Dict[str, Any], *, delay_seconds: int = 0) -> str:
    """
    Queue an HTTP task that POSTs `payload` to the generation worker for `job_id`.
    Returns the task name. The worker route is not OIDC-protected; restrict it at
    the network layer.
    """
    client = tasks_v2.CloudTasksClient()
    parent = client.queue_path(config.gcp_project, config.gcp_location, config.tasks_queue)

    task: Dict[str, Any] = {
        "http_request": {
            "http_method": tasks_v2.HttpMethod.POST,
            "url": worker_url(job_id),
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps(payload).encode("utf-8"),
        },
        "dispatch_deadline": {"seconds": DISPATCH_DEADLINE_SECONDS},
    }
    if delay_seconds > 0:
        ts = timestamp_pb2.Timestamp()
        ts.FromDatetime(datetime.now(timezone.utc) + timedelta(seconds=delay_seconds))
        task["schedule_time"] = ts

    created = client.create_task(parent=parent, task=task)
    log.debug(f"queued {created.name} for job {job_id}")
    return created.name
