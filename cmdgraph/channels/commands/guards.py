"""Stock authorization guards."""

from collections.abc import Iterable

from cmdgraph.channels.commands.base import CommandArgs, Guard


def allow_all(args: CommandArgs) -> bool:
    """Guard that authorizes everyone."""
    return True


def deny_all(args: CommandArgs) -> bool:
    """Guard that authorizes no one."""
    return False


def allowed_users(user_ids: Iterable[str | int]) -> Guard:
    """Build a guard that only authorizes the given users.

    Security model:
    - User IDs are compared as strings, so platform integer IDs work too
    - An empty allowlist denies everyone (secure by default)

    Args:
        user_ids: Allowed user IDs.

    Returns:
        Guard checking ``args.message.user_id`` against the allowlist.
    """
    allowed = frozenset(str(user_id) for user_id in user_ids)

    def guard(args: CommandArgs) -> bool:
        return str(args.message.user_id) in allowed

    return guard
