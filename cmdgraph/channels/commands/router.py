"""Command routing system.

Every registered template is compiled into one shared automaton. At
runtime a message is matched against the whole template set in a single
scan, and the bound guard decides whether the bound handler runs.
"""

import logging
from typing import TYPE_CHECKING

from cmdgraph.channels.commands.base import (
    CommandArgs,
    CommandBinding,
    DispatchOutcome,
    ErrorSink,
    Guard,
    Handler,
    HelpEntry,
    UnauthorizedCallback,
)
from cmdgraph.channels.commands.guards import allow_all
from cmdgraph.core.config.models import RouterConfig
from cmdgraph.routing.automaton import Automaton, MatchResult
from cmdgraph.routing.template import (
    HELP_COMMAND,
    TemplateCompiler,
    parameter_names,
    parse_template,
)

if TYPE_CHECKING:
    from cmdgraph.channels.commands.base import CommandContext
    from cmdgraph.model.message import Message

logger = logging.getLogger(__name__)


class CommandRouter:
    """Routes command messages to handlers through a compiled template automaton.

    Registration order matters: where two templates diverge at the same
    point, the continuation registered first wins when both accept.

    Usage::

        router = CommandRouter()
        router.register("?ping {name}", ping)
        router.register_protected("?ban {user}", ban, allowed_users(["42"]))
        router.freeze()
        await router.execute(message, context)
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        on_unauthorized: UnauthorizedCallback | None = None,
        on_error: ErrorSink | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            config: Router configuration (prefix, denial text).
            on_unauthorized: Called when a guard rejects a matched command.
                Defaults to replying with ``config.unauthorized_message``.
            on_error: Receives errors raised by guards, handlers and the
                unauthorized callback. Defaults to logging them.
        """
        self.config = config or RouterConfig()
        self._automaton: Automaton[CommandBinding] = Automaton()
        self._compiler = TemplateCompiler(self._automaton)
        self._help_listing: dict[str, HelpEntry] | None = {}
        self._on_unauthorized = on_unauthorized or self._deny
        self._on_error = on_error or self._log_error

    @property
    def prefix(self) -> str:
        return self.config.prefix

    @property
    def automaton(self) -> Automaton[CommandBinding]:
        """The shared automaton (read-only once frozen)."""
        return self._automaton

    def register(self, template: str, handler: Handler) -> list[int]:
        """Register a template open to everyone.

        Args:
            template: Command template, e.g. ``"?say {msg}"``.
            handler: Async callable invoked with the match's CommandArgs.

        Returns:
            Accepting states the template compiled to.

        Raises:
            CompileError: If the template is malformed.
        """
        return self.register_protected(template, handler, allow_all)

    def register_protected(self, template: str, handler: Handler, guard: Guard) -> list[int]:
        """Register a template whose handler only runs when ``guard`` passes.

        Args:
            template: Command template.
            handler: Async callable invoked with the match's CommandArgs.
            guard: Predicate evaluated right before the handler.

        Returns:
            Accepting states the template compiled to.

        Raises:
            CompileError: If the template is malformed.
            RuntimeError: If the router is already frozen.
        """
        logger.info(f"Adding command {template}")
        segments = parse_template(template)
        binding = CommandBinding(
            template=template,
            handler=handler,
            guard=guard,
            param_names=parameter_names(segments),
        )
        return self._compiler.compile_segments(segments, binding)

    register_with_guard = register_protected

    def register_help(
        self,
        command: str,
        description: str,
        handler: Handler,
        guard: Guard = allow_all,
    ) -> list[int]:
        """Record a help listing entry and register ``<prefix>help <command>``.

        Args:
            command: Command as shown in the listing, marker included (``"?ping"``).
            description: Short description for the listing.
            handler: Async callable answering the help query.
            guard: Guard for the help query and for listing visibility.

        Returns:
            Accepting states of the help query path.
        """
        base = command[len(self.prefix):] if command.startswith(self.prefix) else command
        logger.info(f"Adding command {self.prefix}{HELP_COMMAND} {base}")
        binding = CommandBinding(template=command, handler=handler, guard=guard)
        finals = self._compiler.compile_help(self.prefix, command, binding)
        if self._help_listing is not None:
            self._help_listing[command] = HelpEntry(description=description, guard=guard)
        return finals

    def take_help_listing(self) -> dict[str, HelpEntry]:
        """Hand off the recorded help listing.

        The listing is returned once; every later call returns an empty dict.
        """
        listing, self._help_listing = self._help_listing, None
        return listing or {}

    def freeze(self) -> None:
        """Stop accepting registrations."""
        if not self._automaton.frozen:
            logger.info(f"Command automaton frozen with {self._automaton.state_count} states")
        self._automaton.freeze()

    def match(self, content: str) -> MatchResult[CommandBinding] | None:
        """Match ``content`` against all registered templates without dispatching.

        Parameters are limited to the ones the matched template declares.
        """
        matched = self._automaton.match(content)
        if matched is not None:
            matched.params = matched.binding.select(matched.params)
        return matched

    async def execute(self, message: "Message", context: "CommandContext") -> DispatchOutcome:
        """Transport entry point: filter out non-commands, then dispatch.

        Messages authored by ``context.bot_user_id`` and messages not
        starting with the configured prefix are ignored.
        """
        if context.bot_user_id is not None and message.user_id == context.bot_user_id:
            return DispatchOutcome.NO_MATCH
        if not message.is_command(self.prefix):
            return DispatchOutcome.NO_MATCH
        return await self.dispatch(message, context)

    async def dispatch(self, message: "Message", context: "CommandContext") -> DispatchOutcome:
        """Match ``message`` and run the guard and handler bound to it.

        Errors from the guard, the handler or the unauthorized callback
        are sent to the error sink and never propagate.

        Returns:
            What happened to the message.
        """
        self.freeze()
        matched = self.match(message.content)
        if matched is None:
            return DispatchOutcome.NO_MATCH

        logger.info(f"Processing command: {message.content}")
        binding = matched.binding
        args = CommandArgs(message=message, context=context, params=matched.params)

        try:
            logger.info("Checking permissions")
            authorized = binding.authorize(args)
        except Exception as e:
            self._report(e)
            return DispatchOutcome.FAILED

        if not authorized:
            logger.info("Not executing command, unauthorized")
            try:
                await self._on_unauthorized(args)
            except Exception as e:
                self._report(e)
                return DispatchOutcome.FAILED
            return DispatchOutcome.UNAUTHORIZED

        try:
            logger.info("Executing command")
            await binding.call(args)
        except Exception as e:
            self._report(e)
            return DispatchOutcome.FAILED
        return DispatchOutcome.HANDLED

    def _report(self, error: Exception) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Error sink raised while reporting a command failure")

    async def _deny(self, args: CommandArgs) -> None:
        await args.reply(self.config.unauthorized_message)

    @staticmethod
    def _log_error(error: Exception) -> None:
        logger.error(f"Command failed: {error}")
