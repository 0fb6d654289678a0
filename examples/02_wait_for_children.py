# RUN: python examples/02_wait_for_children.py
"""wait_for_children and auto_finish_after: completion driven by the last child or a timer."""

import asyncio

from tracekit import Hub, InMemoryTransactionSink, Tracer, TracingOptions


async def worker(transaction: Tracer, name: str, delay: float) -> None:
    span = transaction.start_child("task", description=name)
    await asyncio.sleep(delay)
    await span.finish()


async def main() -> None:
    sink = InMemoryTransactionSink()
    hub = Hub(TracingOptions(traces_sample_rate=1.0, wait_for_children=True), sinks=[sink])

    transaction = hub.start_transaction("batch", "queue.process")
    assert isinstance(transaction, Tracer)
    workers = [
        asyncio.create_task(worker(transaction, f"job-{i}", 0.05 * i)) for i in range(1, 4)
    ]

    await transaction.finish()
    print("finished right after finish():", transaction.finished)

    await asyncio.gather(*workers)
    await transaction.wait_until_finished(timeout=1)
    print("finished after workers:", transaction.finished)

    idle = hub.start_transaction("idle-screen", "ui.load", auto_finish_after=0.2)
    await idle.wait_until_finished(timeout=1)
    print("idle transaction status:", idle.status)

    for record in sink.records:
        print(record.name, record.status, [s.description for s in record.spans])


if __name__ == "__main__":
    asyncio.run(main())
