"""Chain execution — runs a matched route's steps in order.

Steps run strictly one after another. A step that returns a response
ends the chain; the steps after it never start. A middleware step that
proceeds gets ``next``, which runs the rest of the chain and hands back
its response.
"""

from kida import Environment

from perch._internal.invoke import invoke
from perch.errors import ChainExhausted
from perch.http.request import Request
from perch.http.response import Response
from perch.routing.route import RouteMatch
from perch.routing.steps import TerminalStep
from perch.server.negotiation import negotiate


async def run_chain(
    match: RouteMatch,
    request: Request,
    *,
    kida_env: Environment | None = None,
    template_suffix: str = ".html",
) -> Response:
    """Run ``match.chain`` against *request* and return the response.

    Raises ``ChainExhausted`` when a step returns ``None``.
    """
    steps = match.chain.steps
    pattern = match.entry.pattern.source
    request = request.with_path_params(match.path_params)

    async def run_from(index: int, req: Request) -> Response:
        step = steps[index]
        if isinstance(step, TerminalStep):
            result = await invoke(step.func, req)
        else:

            async def next_step(next_req: Request) -> Response:
                return await run_from(index + 1, next_req)

            result = await invoke(step.func, req, next_step)

        if result is None:
            raise ChainExhausted(pattern, step.name)
        return negotiate(result, kida_env=kida_env, template_suffix=template_suffix)

    return await run_from(0, request)
