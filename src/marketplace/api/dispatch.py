"""Runs write commands off the event loop.

A command may wait on row locks held by another request, so it runs on the
threadpool, inside its own marketplace domain context.
"""

from fastapi.concurrency import run_in_threadpool

from marketplace.domain import marketplace
from marketplace.shared.transaction import process


def _process_in_domain(command):
    with marketplace.domain_context():
        return process(command)


async def dispatch(command):
    return await run_in_threadpool(_process_in_domain, command)
