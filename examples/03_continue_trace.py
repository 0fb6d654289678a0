# RUN: python examples/03_continue_trace.py
"""Continue a trace from an incoming header and sample with a custom sampler."""

import asyncio

from tracekit import TRACE_HEADER_NAME, Hub, InMemoryTransactionSink, SamplingContext


def sampler(ctx: SamplingContext) -> float | None:
    if ctx.transaction_context.name.startswith("/health"):
        return 0.0
    return None  # defer to the upstream decision


async def handle(hub: Hub, path: str, headers: dict[str, str]) -> None:
    transaction = hub.start_transaction(
        path, "http.server", trace_header=headers.get(TRACE_HEADER_NAME)
    )
    await transaction.start_child("handler").finish()
    await transaction.finish()


async def main() -> None:
    sink = InMemoryTransactionSink()
    hub = Hub(sinks=[sink], traces_sampler=sampler)

    upstream = {TRACE_HEADER_NAME: "771a43a4192642f0b136d5159a501700-77d4d2a9b9d24e32-1"}
    await handle(hub, "/orders", upstream)
    await handle(hub, "/health", upstream)

    for record in sink.records:
        print(record.name, record.trace.trace_id, record.trace.parent_span_id)


if __name__ == "__main__":
    asyncio.run(main())
