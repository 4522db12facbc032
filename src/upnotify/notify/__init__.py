from .base import FormField, Notifier, NotifierDescriptor, WebhookTestError
from .discord import DISCORD_DESCRIPTOR, DiscordNotifier

__all__ = [
    "DISCORD_DESCRIPTOR",
    "DiscordNotifier",
    "FormField",
    "Notifier",
    "NotifierDescriptor",
    "WebhookTestError",
]
