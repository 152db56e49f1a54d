# -*- coding: utf-8 -*-

import logging
from typing import Any, Optional

from plyer import notification

from core.constants import APP_NAME
from domain.models import Settings

logger = logging.getLogger(__name__)

DEFAULT = "default"
GRANTED = "granted"
DENIED = "denied"


class Notifier:
    """
    Desktop notifications through plyer.
    Fire-and-forget: gated by the settings toggle and the permission state.
    """

    def __init__(self, settings: Settings, backend: Optional[Any] = notification):
        self.settings = settings
        self.backend = backend
        self.permission = DEFAULT

    def request_permission(self) -> str:
        if self.permission == DEFAULT:
            self.permission = GRANTED if self.backend is not None else DENIED
        return self.permission

    @property
    def granted(self) -> bool:
        return self.permission == GRANTED

    def notify(self, title: str, body: str) -> bool:
        if not self.settings.notifications_on or not self.granted:
            return False
        try:
            self.backend.notify(
                title=title, message=body, app_name=APP_NAME, timeout=5
            )
        except NotImplementedError:
            # no notification backend on this platform
            self.permission = DENIED
            logger.warning("Notifications are not supported here; disabling.")
            return False
        except Exception:
            logger.warning("Notification %r failed", title, exc_info=True)
            return False
        return True
