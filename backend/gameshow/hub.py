from typing import Any, Iterable, Optional


class SocketIOHub:
    """Room-scoped delivery on top of a Flask-SocketIO server.

    Game services only talk to this object, so every emit lands on the
    configured namespace and background work goes through Socket.IO's own
    task and sleep primitives (threading, eventlet or gevent alike).
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, data: Optional[Any] = None, to: Optional[str] = None) -> None:
        if data is None:
            self.socketio.emit(event, to=to, namespace=self.namespace)
        else:
            self.socketio.emit(event, data, to=to, namespace=self.namespace)

    def emit_each(self, event: str, data: Optional[Any], sids: Iterable[str]) -> None:
        for sid in list(sids):
            self.emit(event, data, to=sid)

    def enter_room(self, sid: str, room: str) -> None:
        self.socketio.server.enter_room(sid, room, namespace=self.namespace)

    def leave_room(self, sid: str, room: str) -> None:
        self.socketio.server.leave_room(sid, room, namespace=self.namespace)

    def close_room(self, room: str) -> None:
        self.socketio.close_room(room, namespace=self.namespace)

    def start_background_task(self, target, *args, **kwargs):
        return self.socketio.start_background_task(target, *args, **kwargs)

    def sleep(self, seconds: float) -> None:
        self.socketio.sleep(seconds)
