#!/usr/bin/env python3
"""
Mock server for exercising the uptime monitor locally.

Every path answers with a random outcome:
- 85% of requests: 200 OK after 5-500ms
- 10% of requests: 503 Service Unavailable after 5-500ms
- 5% of requests: headers after 5-500ms, then a body that stalls for 5-60s

The stalled bodies reproduce the slow-read case a probe timeout has to cut short.
"""

import asyncio
import random
import string

from aiohttp import web

# Constants
PORT = 8080
HOST = "localhost"
RESPONSE_LENGTH = 100
OK_PROBABILITY = 0.85
ERROR_PROBABILITY = 0.10
FAST_RESPONSE_MIN_MS = 5
FAST_RESPONSE_MAX_MS = 500
STALL_MIN_S = 5
STALL_MAX_S = 60


def _random_body() -> str:
    return "".join(random.choice(string.ascii_lowercase) for _ in range(RESPONSE_LENGTH))


async def handle_request(request: web.Request) -> web.StreamResponse:
    """
    Handle incoming HTTP requests with a randomly chosen behaviour.

    Args:
        request: The incoming HTTP request

    Returns:
        A complete response, or a streamed response whose body stalls
    """
    await asyncio.sleep(random.uniform(FAST_RESPONSE_MIN_MS, FAST_RESPONSE_MAX_MS) / 1000)

    roll = random.random()
    if roll < OK_PROBABILITY:
        return web.Response(text=_random_body())
    if roll < OK_PROBABILITY + ERROR_PROBABILITY:
        return web.Response(status=503, text="maintenance")

    response = web.StreamResponse()
    await response.prepare(request)
    await response.write(b"partial ")
    await asyncio.sleep(random.uniform(STALL_MIN_S, STALL_MAX_S))
    await response.write(_random_body().encode())
    await response.write_eof()
    return response


async def init_app() -> web.Application:
    app = web.Application()
    app.add_routes([web.get("/{tail:.*}", handle_request)])
    return app


def run_server() -> None:
    web.run_app(init_app(), host=HOST, port=PORT)


if __name__ == "__main__":
    print(f"Starting mock server at http://{HOST}:{PORT}")
    print(f"- {OK_PROBABILITY * 100:.0f}% OK, {ERROR_PROBABILITY * 100:.0f}% 503, the rest stall")
    run_server()
