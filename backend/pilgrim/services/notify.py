from __future__ import annotations

import logging
from typing import Callable

log = logging.getLogger("pilgrim.notify")

# (user_id, text) -> delivered?
Notifier = Callable[[int, str], bool]


def log_notifier(user_id: int, text: str) -> bool:
    """Default sink: delivery belongs to the caller, so just record the intent."""
    log.info("notify user_id=%s text=%s", user_id, text)
    return True


def notify_user(notifier: Notifier | None, user_id: int | None, text: str) -> bool:
    """Best-effort notification.

    Runs after the moderation transaction has committed. Returns True if the
    notifier reported success, else False. Never raises.
    """
    if notifier is None or not user_id:
        return False
    try:
        ok = bool(notifier(int(user_id), text))
    except Exception as e:
        log.exception("notify exception user_id=%s: %s", user_id, e)
        return False
    if not ok:
        log.warning("notify failed user_id=%s", user_id)
    return ok
