import logging

logger = logging.getLogger("auth")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured auth event with action, actor, branch, ip and status."""
    payload = {
        "event": f"auth.{action}",
        "action": action,
        "ip": request.META.get("REMOTE_ADDR"),
        "status": status,
    }
    if user is not None and getattr(user, "is_authenticated", False):
        payload["user_id"] = user.id
        payload["email"] = getattr(user, "email", None)
        payload["role"] = getattr(user, "role", None)
        payload["branch_id"] = getattr(user, "branch_id", None)
    if extra:
        payload.update(extra)
    logger.info(payload)
