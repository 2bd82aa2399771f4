"""
External collaborators: notification delivery and object storage.
"""

from contentops.kernel.notifications.senders import (
    LoggingNotificationSender,
    NotificationSender,
    SmtpNotificationSender,
    TemplateKind,
    get_notification_sender,
    notify_safely,
)
from contentops.kernel.notifications.storage import (
    LocalObjectStorage,
    ObjectStorage,
    image_folder,
    report_folder,
)

__all__ = [
    "NotificationSender",
    "LoggingNotificationSender",
    "SmtpNotificationSender",
    "TemplateKind",
    "get_notification_sender",
    "notify_safely",
    "ObjectStorage",
    "LocalObjectStorage",
    "image_folder",
    "report_folder",
]
