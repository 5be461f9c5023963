"""Maintenance gate: request admission control.

Two states driven by ``document.maintenance.enabled`` in the effective
configuration document. The gate keeps no state of its own; it reads the
document on every request.

In maintenance:
- administrators pass unconditionally
- allow-listed paths (settings.maintenance_exempt_paths) pass for anyone
- everything else is rejected with SERVICE_UNDER_MAINTENANCE carrying the
  bilingual message and the minimal theme needed to render the notice
"""

from collections.abc import Iterable, Mapping
from typing import Any

from app.core.errors import ServiceUnderMaintenanceError

# Theme keys a client needs to render the maintenance page.
_NOTICE_THEME_KEYS = (
    "logoUrl",
    "logoWidth",
    "logoHeight",
    "primaryColor",
    "secondaryColor",
    "navbarColor",
    "navTextColor",
)


def is_maintenance_enabled(document: Mapping[str, Any]) -> bool:
    """True when the document switches the service into maintenance."""
    maintenance = document.get("maintenance") or {}
    return maintenance.get("enabled") is True


def is_exempt(path: str, exempt_paths: Iterable[str]) -> bool:
    """Check a request path against the allow-list.

    Matching is exact after stripping a trailing slash.
    """
    normalized = path.rstrip("/") or "/"
    return any(normalized == exempt.rstrip("/") for exempt in exempt_paths)


def maintenance_notice(document: Mapping[str, Any]) -> dict[str, Any]:
    """Build the payload carried by a maintenance rejection."""
    maintenance = document.get("maintenance") or {}
    theme = document.get("theme") or {}
    content = document.get("content") or {}
    return {
        "message_en": maintenance.get("message_en", ""),
        "message_ar": maintenance.get("message_ar", ""),
        "theme": {key: theme[key] for key in _NOTICE_THEME_KEYS if key in theme},
        "site_name_en": content.get("siteNameEn"),
        "site_name_ar": content.get("siteNameAr"),
    }


def check_admission(
    document: Mapping[str, Any],
    *,
    path: str,
    is_admin: bool,
    exempt_paths: Iterable[str],
) -> None:
    """Admit or reject one request.

    Args:
        document: Effective configuration document.
        path: Request path.
        is_admin: Whether the caller presented a valid administrator token.
        exempt_paths: Paths reachable by anyone during maintenance.

    Raises:
        ServiceUnderMaintenanceError: Maintenance is on and the request is
            neither from an administrator nor allow-listed.
    """
    if not is_maintenance_enabled(document):
        return
    if is_admin or is_exempt(path, exempt_paths):
        return
    raise ServiceUnderMaintenanceError(maintenance_notice(document))
