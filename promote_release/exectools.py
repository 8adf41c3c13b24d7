import asyncio
import logging
import os
import shlex
from typing import List, Tuple, Union

from opentelemetry import trace
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from promote_release.exceptions import SubprocessError

logger = logging.getLogger(__name__)
TRACER = trace.get_tracer(__name__)


async def cmd_assert_async(cmd: Union[List[str], str], **kwargs) -> Tuple[str, str]:
    """ Runs a command asynchronously and raises SubprocessError if it exits with a non-zero code.
    :param cmd <string|list>: A shell command
    :param kwargs: Other arguments passing to asyncio.subprocess.create_subprocess_exec
    :return: stdout,stderr
    """

    if isinstance(cmd, str):
        cmd_list = shlex.split(cmd)
    else:
        cmd_list = cmd

    # Remove any empty tokens from the command list
    cmd_list = [token for token in cmd_list if token]

    with TRACER.start_as_current_span("cmd_assert_async") as span:
        span.set_attribute("promote_release.param.cmd", cmd_list)

        # capture stdout and stderr if they are not set in kwargs
        kwargs.setdefault("stdout", asyncio.subprocess.PIPE)
        kwargs.setdefault("stderr", asyncio.subprocess.PIPE)

        # Propagate trace context to subprocess
        env = kwargs.get("env") or os.environ.copy()
        carrier = {}
        TraceContextTextMapPropagator().inject(carrier)
        if "traceparent" in carrier:
            env["TRACEPARENT"] = carrier["traceparent"]
        kwargs["env"] = env

        logger.info("Executing: %s", shlex.join(cmd_list))
        proc = await asyncio.subprocess.create_subprocess_exec(cmd_list[0], *cmd_list[1:], **kwargs)
        stdout, stderr = await proc.communicate()
        stdout = stdout.decode() if stdout else ""
        stderr = stderr.decode() if stderr else ""
        span.set_attribute("promote_release.result.exit_code", proc.returncode)
        if proc.returncode != 0:
            raise SubprocessError(cmd_list, proc.returncode, stderr)
        span.set_status(trace.StatusCode.OK)
    return stdout, stderr
