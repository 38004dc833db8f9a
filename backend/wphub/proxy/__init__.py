"""WordPress commands relayed to managed sites."""

from wphub.proxy.cache import KINDS, PLUGINS, THEMES, ResourceCache
from wphub.proxy.commands import CommandProxy, plugin_endpoint
from wphub.proxy.models import WordPressPlugin, WordPressTheme
from wphub.proxy.toggle import ToggleReconciler, ToggleResult, inverse_status

__all__ = [
    "CommandProxy",
    "KINDS",
    "PLUGINS",
    "ResourceCache",
    "THEMES",
    "ToggleReconciler",
    "ToggleResult",
    "WordPressPlugin",
    "WordPressTheme",
    "inverse_status",
    "plugin_endpoint",
]
