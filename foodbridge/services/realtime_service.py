from foodbridge import socketio
from foodbridge.utils.clock import now_ms


def publish_platform_update(scope: str, action: str, actor_role: str = "system", record_id: str = None):
    payload = {
        "scope": scope,
        "action": action,
        "actor_role": actor_role,
        "timestamp": now_ms(),
    }
    if record_id:
        payload["id"] = record_id

    socketio.emit("platform_update", payload)
