"""Help menu handler."""

import logging

from cmdgraph.channels.commands.base import CommandArgs, HelpEntry

logger = logging.getLogger(__name__)


class HelpMenu:
    """Display the commands the requesting user may run.

    Built from the listing handed off by ``CommandRouter.take_help_listing``
    and registered as the handler of a plain ``<prefix>help`` template.
    """

    def __init__(self, listing: dict[str, HelpEntry]) -> None:
        self._listing = dict(listing)

    def render(self, args: CommandArgs) -> str:
        """Format the listing entries visible to ``args``.

        Args:
            args: Arguments of the help request; entry guards see these.

        Returns:
            Help text, one ``command - description`` line per visible entry.
        """
        lines = []
        for command, entry in sorted(self._listing.items()):
            try:
                visible = entry.guard(args)
            except Exception as e:
                logger.warning(f"Hiding {command} from help, guard failed: {e}")
                continue
            if visible:
                lines.append(f"{command} - {entry.description}")

        if not lines:
            return "No commands available."
        return "\n".join(["Available commands:\n", *lines])

    async def __call__(self, args: CommandArgs) -> None:
        """Execute the help command."""
        await args.reply(self.render(args))
