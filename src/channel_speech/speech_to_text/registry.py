"""Registry of active voice listeners grouped by client."""

from enum import Enum

from .logging_utils import get_logger

logger = get_logger(__name__)


class ListenerState(Enum):
    """Attachment state of one (client, guild) pair."""
    INACTIVE = "inactive"
    REGISTERING = "registering"
    SUBSCRIBED = "subscribed"


class ListenerRegistry:
    """
    Tracks which guilds have an active listener for each client.

    Keeping this per client allows several clients to share one registry in the
    same process. All methods are synchronous so that a check and the following
    registration can't be interleaved with another event handler.
    """

    def __init__(self) -> None:
        self._clients: dict[str, dict[str, ListenerState]] = {}

    def state(self, client_id: str, guild_id: str) -> ListenerState:
        """Current state of a (client, guild) pair."""
        return self._clients.get(client_id, {}).get(guild_id, ListenerState.INACTIVE)

    def try_register(self, client_id: str, guild_id: str) -> bool:
        """
        Move a pair from INACTIVE to REGISTERING.

        Returns:
            True if the pair was registered, False if a listener is already
            registering or subscribed
        """
        guilds = self._clients.setdefault(client_id, {})
        if guild_id in guilds:
            return False

        guilds[guild_id] = ListenerState.REGISTERING
        logger.trace(f"Registering listener for client {client_id} in guild {guild_id}")
        return True

    def mark_subscribed(self, client_id: str, guild_id: str) -> None:
        """Record that the speaking subscription for a pair is attached."""
        guilds = self._clients.get(client_id)
        if guilds is None or guild_id not in guilds:
            raise KeyError(f"No listener registered for guild {guild_id}")
        guilds[guild_id] = ListenerState.SUBSCRIBED

    def release(self, client_id: str, guild_id: str) -> None:
        """Return a pair to INACTIVE."""
        guilds = self._clients.get(client_id)
        if guilds is not None:
            guilds.pop(guild_id, None)

    def active_guilds(self, client_id: str) -> set[str]:
        """Guilds that currently have a registering or subscribed listener."""
        return set(self._clients.get(client_id, {}))
