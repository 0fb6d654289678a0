# RUN: python examples/01_transaction.py
"""Transaction basics: child spans, tags, an abandoned span, and a JSONL sink."""

import asyncio

from tracekit import (
    FileTransactionSink,
    Hub,
    SpanStatus,
    StructlogTransactionSink,
    TracingOptions,
    configure_logging,
)


async def main() -> None:
    configure_logging("INFO", json=False)

    hub = Hub(TracingOptions(traces_sample_rate=1.0))
    hub.add_sink(StructlogTransactionSink()).add_sink(FileTransactionSink("transactions.jsonl"))

    transaction = hub.start_transaction("checkout", "http.server", description="POST /checkout")
    transaction.set_tag("region", "eu-west-1")
    transaction.set_data("cart_items", 3)

    span = transaction.start_child("db.query", description="SELECT * FROM carts")
    span.set_tag("db.system", "postgresql")
    await asyncio.sleep(0.05)
    await span.finish(status=SpanStatus.RESOURCE_EXHAUSTED)

    nested = span.start_child("cache.get")  # parent already finished: no-op
    await nested.finish()

    payment = transaction.start_child("http.client", description="POST /charge")
    print("propagate:", payment.to_trace_header().value)
    payment.start_child("serialize", description="never finished")
    await payment.finish(status=SpanStatus.from_http_status(503))

    await transaction.finish(status=SpanStatus.OK)
    await hub.close()


if __name__ == "__main__":
    asyncio.run(main())
