"""Managed WordPress sites."""

from wphub.sites.models import ConnectionStatus, Site, normalize_site_url, validate_base_url
from wphub.sites.service import SITES_COLLECTION, SiteService

__all__ = [
    "ConnectionStatus",
    "SITES_COLLECTION",
    "Site",
    "SiteService",
    "normalize_site_url",
    "validate_base_url",
]
