"""Claude Code CLI streaming implementation."""

import asyncio
import json
import os
from collections import deque
from typing import AsyncIterator, Deque, Dict, List, Optional

from ..errors import ClaudeExitError, ClaudeSpawnError, ProtocolDecodeError
from ..models.message import CallerContext, ProtocolMessage
from ..models.session import ConversationSession
from ..utils.jsonl_parser import decode_protocol_line, iter_lines
from ..utils.logger import get_component_logger
from .tool_servers import McpServerConfig, ToolServerProvider

PERMISSION_SERVER_NAME = "permission-prompt"
PERMISSION_PROMPT_TOOL = "mcp__permission-prompt__permission_prompt"
PERMISSION_ALLOWED_TOOL = "mcp__permission-prompt"

STDERR_TAIL_LINES = 20
TERMINATE_GRACE_SECONDS = 5.0
AUTH_CHECK_TIMEOUT_SECONDS = 10.0


class ClaudeStreamer:
    """
    Runs one `claude --print` process per query and streams its
    stream-json output.

    The streamer holds no per-query state; concurrent queries each get
    their own subprocess.
    """

    def __init__(
        self,
        tool_servers: ToolServerProvider,
        binary: str = "claude",
        bot_token: Optional[str] = None,
        permission_server_command: Optional[str] = None,
        permission_server_args: Optional[List[str]] = None,
        env_vars: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the streamer.

        Args:
            tool_servers: Source of MCP servers and default allowed tools
            binary: Claude CLI binary
            bot_token: Bot credential passed only to the permission prompt server
            permission_server_command: Command of the permission prompt server;
                without it interactive queries are refused
            permission_server_args: Arguments of the permission prompt server
            env_vars: Extra environment variables for the CLI process
        """
        self.tool_servers = tool_servers
        self.binary = binary
        self.bot_token = bot_token
        self.permission_server_command = permission_server_command
        self.permission_server_args = list(permission_server_args or [])
        self.env_vars = env_vars or {}
        self.logger = get_component_logger("ClaudeStreamer")

    @property
    def supports_interactive(self) -> bool:
        """Whether a permission prompt server is configured for caller contexts."""
        return bool(self.permission_server_command)

    # === Arguments ===

    def _permission_server(self, caller_context: CallerContext) -> McpServerConfig:
        return {
            "command": self.permission_server_command,
            "args": list(self.permission_server_args),
            "env": {
                "SLACK_BOT_TOKEN": self.bot_token or "",
                "SLACK_CONTEXT": caller_context.to_env_json(),
            },
        }

    def build_args(
        self,
        prompt: str,
        session: Optional[ConversationSession] = None,
        working_directory: Optional[str] = None,
        caller_context: Optional[CallerContext] = None
    ) -> List[str]:
        """
        Build the CLI arguments for one query.

        Args:
            prompt: User prompt, always the last argument
            session: Session to resume if it carries a session ID
            working_directory: Directory passed as --cwd
            caller_context: Enables interactive permissions when present

        Returns:
            Argument list, without the binary

        Raises:
            ValueError: If a caller context is given but no permission prompt
                server is configured
        """
        if caller_context and not self.supports_interactive:
            raise ValueError("Interactive queries need a permission prompt server command")

        args = ["--print", "--output-format", "stream-json", "--verbose"]

        if working_directory:
            args.extend(["--cwd", working_directory])

        permission_mode = "default" if caller_context else "bypassPermissions"
        args.extend(["--permission-mode", permission_mode])

        mcp_servers: Dict[str, McpServerConfig] = dict(self.tool_servers.get_server_configuration() or {})

        if caller_context:
            mcp_servers[PERMISSION_SERVER_NAME] = self._permission_server(caller_context)
            args.extend(["--permission-prompt-tool-name", PERMISSION_PROMPT_TOOL])
            self.logger.debug(
                f"Added permission prompt tool: channel={caller_context.channel}, "
                f"thread={caller_context.thread_ts}, user={caller_context.user}"
            )

        if mcp_servers:
            args.extend(["--mcp-config", json.dumps({"mcpServers": mcp_servers})])

            allowed_tools = list(self.tool_servers.get_default_allowed_tools())
            if caller_context:
                allowed_tools.append(PERMISSION_ALLOWED_TOOL)
            if allowed_tools:
                args.append("--allowedTools")
                args.extend(allowed_tools)

            self.logger.debug(
                f"Added MCP configuration: servers={list(mcp_servers)}, allowed_tools={allowed_tools}"
            )

        if session is not None and session.session_id:
            args.extend(["--resume", session.session_id])
            self.logger.debug(f"Resuming session: {session.session_id}")
        else:
            self.logger.debug("Starting new Claude conversation")

        args.append(prompt)
        return args

    # === Streaming ===

    async def stream_query(
        self,
        prompt: str,
        session: Optional[ConversationSession] = None,
        cancel_event: Optional[asyncio.Event] = None,
        working_directory: Optional[str] = None,
        caller_context: Optional[CallerContext] = None
    ) -> AsyncIterator[ProtocolMessage]:
        """
        Run a query and yield its protocol messages in arrival order.

        The first system/init message stores its session ID on `session`.
        Lines that fail to decode are logged and skipped. Setting
        `cancel_event` terminates the process; lines already buffered may
        still be yielded.

        Args:
            prompt: User prompt
            session: Session to resume and to record the session ID on
            cancel_event: Set to cancel the query
            working_directory: CLI working directory
            caller_context: Messaging context for interactive permissions

        Yields:
            Decoded protocol messages

        Raises:
            ClaudeSpawnError: If the process could not be started
            ClaudeExitError: If the process exited with a non-zero code,
                raised after all output has been yielded
        """
        args = self.build_args(prompt, session, working_directory, caller_context)
        self.logger.debug(f"Claude CLI arguments: {args[:-1]}, prompt_length={len(prompt)}")

        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=working_directory or None,
                env={**os.environ, **self.env_vars}
            )
        except OSError as e:
            self.logger.error(f"Failed to spawn Claude CLI: {e}")
            raise ClaudeSpawnError(self.binary, str(e)) from e

        self.logger.info(f"Claude CLI started (pid={process.pid}, cwd={working_directory or os.getcwd()})")

        # The prompt travels as an argument; close stdin so the CLI never waits on it.
        if process.stdin is not None:
            process.stdin.close()

        stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        stderr_task = asyncio.create_task(self._drain_stderr(process, stderr_tail))
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.create_task(self._terminate_on_cancel(process, cancel_event))

        session_captured = False
        try:
            async for line in iter_lines(process.stdout):
                if not line.strip():
                    continue

                try:
                    message = decode_protocol_line(line)
                except ProtocolDecodeError as e:
                    self.logger.error(f"{e} (line={line[:200]!r})")
                    continue

                if message.is_init() and session is not None and not session_captured:
                    session_captured = True
                    if isinstance(message.session_id, str) and message.session_id:
                        session.session_id = message.session_id
                    tools = message.tools if isinstance(message.tools, list) else []
                    self.logger.info(
                        f"Session initialized: session_id={message.session_id}, "
                        f"model={message.model}, tools={len(tools)}"
                    )

                yield message

            returncode = await process.wait()
            # Negative codes mean the process was killed by a signal, which is
            # how a cancelled query ends.
            if returncode > 0:
                await stderr_task
                raise ClaudeExitError(returncode, list(stderr_tail))

        except ClaudeExitError as e:
            self.logger.error(f"Error in Claude query: {e}; stderr tail: {e.stderr_tail}")
            raise
        except Exception as e:
            self.logger.error(f"Error in Claude query: {e}")
            raise
        finally:
            await self._cleanup(process, stderr_task, cancel_task)

    async def _cleanup(
        self,
        process: asyncio.subprocess.Process,
        stderr_task: asyncio.Task,
        cancel_task: Optional[asyncio.Task]
    ) -> None:
        """Stop helper tasks and make sure the process is gone."""
        if cancel_task is not None:
            cancel_task.cancel()

        if process.returncode is None:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=TERMINATE_GRACE_SECONDS)
            except ProcessLookupError:
                pass
            except asyncio.TimeoutError:
                # Force kill if termination times out
                process.kill()
                await process.wait()

        if not stderr_task.done():
            stderr_task.cancel()

        tasks = [task for task in (stderr_task, cancel_task) if task is not None]
        await asyncio.gather(*tasks, return_exceptions=True)
        self.logger.debug(f"Claude CLI cleaned up (pid={process.pid}, returncode={process.returncode})")

    async def _drain_stderr(self, process: asyncio.subprocess.Process, tail: Deque[str]) -> None:
        """Log stderr for debugging; it is never parsed."""
        if process.stderr is None:
            return
        async for line in iter_lines(process.stderr):
            if line.strip():
                tail.append(line)
                self.logger.debug(f"Claude CLI stderr: {line}")

    async def _terminate_on_cancel(
        self,
        process: asyncio.subprocess.Process,
        cancel_event: asyncio.Event
    ) -> None:
        await cancel_event.wait()
        if process.returncode is None:
            self.logger.info(f"Query cancelled, terminating Claude CLI (pid={process.pid})")
            try:
                process.terminate()
            except ProcessLookupError:
                pass

    # === Health ===

    async def check_auth(self, timeout: float = AUTH_CHECK_TIMEOUT_SECONDS) -> bool:
        """
        Check whether the Claude CLI is authenticated.

        Args:
            timeout: Seconds to wait for `claude auth status`

        Returns:
            True if `claude auth status` reports Authenticated; False if it
            cannot be started or does not answer within the timeout
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary, "auth", "status",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            self.logger.error(f"Failed to check Claude authentication status: {e}")
            return False

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"Claude authentication check timed out after {timeout}s")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            return False

        return "Authenticated" in stdout.decode("utf-8", errors="replace")
