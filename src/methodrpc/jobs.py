"""
Example service: an in-memory job store exposed at /jobs.

    GET  /jobs/  -> JobsAPI.list
    POST /jobs/  -> JobsAPI.create
"""
from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import List

from flask import Flask

from .config import ServerConfig
from .context import Context
from .server import create_app as create_server_app
from .service import build_service


@dataclass
class Job:
    id: int = 0
    name: str = ""


@dataclass
class JobsList:
    jobs: List[Job] = field(default_factory=list)


class JobStore:
    """Thread-safe store; the dispatcher does no locking of its own."""

    def __init__(self):
        self._lock = threading.RLock()
        self._id = 0
        self._jobs: List[Job] = []

    def save(self, job: Job) -> Job:
        with self._lock:
            self._id += 1
            job.id = self._id
            self._jobs.append(copy.copy(job))
            return job

    def all(self) -> List[Job]:
        with self._lock:
            return [copy.copy(j) for j in self._jobs]


class JobsAPI:

    def __init__(self, store: JobStore | None = None):
        self._store = store or JobStore()

    def create(self, ctx: Context, job: Job) -> Job:
        return self._store.save(job)

    def list(self, ctx: Context) -> JobsList:
        return JobsList(jobs=self._store.all())


def create_app(config: ServerConfig | None = None, store: JobStore | None = None) -> Flask:
    config = config or ServerConfig.from_env()
    service = build_service(JobsAPI(store))
    service.get("/", "list")
    service.post("/", "create")
    return create_server_app([(service, config.mount_path)], config=config)
