from typing import Callable, Iterable, Optional, Set

from brainbrawl.messages import AdminState, Event, GameStateSnapshot, event_name

# emit(event_name, payload, to) where to=None means every connection
Emitter = Callable[[str, dict, Optional[str]], None]


class Broadcaster:
    """Fans events out to everyone, single connections, or admin observers.

    Sends are fire-and-forget; a failed emit never blocks a state change.
    """

    def __init__(self, emit: Emitter, logger=None):
        self._emit = emit
        self._logger = logger
        self.admins: Set[str] = set()

    def to_all(self, event: Event) -> None:
        self._send(event, None)

    def to_connection(self, sid: str, event: Event) -> None:
        self._send(event, sid)

    def to_connections(self, sids: Iterable[str], event: Event) -> None:
        for sid in sids:
            self._send(event, sid)

    def to_admins(self, event: Event) -> None:
        for sid in sorted(self.admins):
            self._send(event, sid)

    def publish_state(self, snapshot: dict) -> None:
        self.to_all(GameStateSnapshot(snapshot=snapshot))
        self.to_admins(AdminState(snapshot=snapshot))

    def _send(self, event: Event, to: Optional[str]) -> None:
        name = event_name(event)
        try:
            self._emit(name, event.payload(), to)
        except Exception:
            if self._logger:
                self._logger.exception(f"[emit-failed] event={name} to={to}")
