"""
Concurrent independent reads.

Dashboard, prep briefing and reflection stats each need several reads that
do not depend on each other. run_parallel fans them out over a thread pool;
every task runs inside its own application context and therefore gets its
own Flask-SQLAlchemy session (sessions are never shared across threads).

Controlled by config:
    PARALLEL_READS              False → run the tasks one after another
    PARALLEL_READS_MAX_WORKERS  pool size

Usage:
    results = run_parallel(
        commitments=lambda: CommitmentsRepository().list(user_id, statuses=["open"]),
        projects=lambda: ProjectsRepository().list(user_id),
    )
    results["commitments"], results["projects"]

Results from a worker session are detached once its context closes, so
callers only read column attributes that were loaded by the query.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from flask import current_app

logger = logging.getLogger(__name__)


def run_parallel(**tasks) -> dict:
    """Run zero-argument callables concurrently; return {name: result}.

    The first task exception propagates after all tasks finished.
    """
    if not tasks:
        return {}

    app = current_app._get_current_object()
    if not app.config.get("PARALLEL_READS", True) or len(tasks) == 1:
        return {name: fn() for name, fn in tasks.items()}

    def _in_context(fn):
        def runner():
            with app.app_context():
                return fn()
        return runner

    max_workers = min(len(tasks), app.config.get("PARALLEL_READS_MAX_WORKERS", 4))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="leaderdojo-read") as pool:
        futures = {name: pool.submit(_in_context(fn)) for name, fn in tasks.items()}
        results = {}
        first_error = None
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except Exception as exc:
                logger.warning("Parallel read %r failed: %s", name, exc)
                if first_error is None:
                    first_error = exc
    if first_error is not None:
        raise first_error
    return results
