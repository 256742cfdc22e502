"""Saved template storage helpers for the Thumbcraft API.

Templates are small named bundles of art-direction options that a client can
apply to later generation requests.  They are persisted in a single
``templates.json`` file inside the data directory:

- entries are plain dictionaries in the camelCase wire format
- list order is reverse-chronological (newest first)
- a missing or unreadable file is treated as an empty store

The helpers are synchronous and are only called from the event loop thread,
so a load-modify-save sequence inside one route handler is never interleaved
with another.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


def load_templates(templates_path: Path) -> list[dict]:
    """Load saved templates, newest first.

    Entries that are not dictionaries or lack an ``id`` are dropped.

    Args:
        templates_path: Path to ``templates.json``.

    Returns:
        List of template dictionaries in persisted order.
    """
    if not templates_path.exists():
        return []

    try:
        with open(templates_path, encoding="utf-8") as handle:
            raw_entries = json.load(handle)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {templates_path}, treating as empty: {e}")
        return []

    if not isinstance(raw_entries, list):
        return []

    return [entry for entry in raw_entries if isinstance(entry, dict) and entry.get("id")]


def save_templates(templates_path: Path, templates: list[dict]) -> None:
    """Persist the template list to disk.

    Args:
        templates_path: Path to ``templates.json``.
        templates: Template dictionaries to persist.
    """
    templates_path.parent.mkdir(parents=True, exist_ok=True)
    with open(templates_path, "w", encoding="utf-8") as handle:
        json.dump(templates, handle, indent=2)


def add_template(templates_path: Path, name: str, options: dict) -> dict:
    """Create a template and store it at the front of the list.

    Args:
        templates_path: Path to ``templates.json``.
        name: Display name.
        options: Serialised :class:`~thumbcraft.api.models.TemplateOptions`.

    Returns:
        The stored template dictionary.
    """
    entry = {
        "id": uuid.uuid4().hex,
        "name": name,
        "options": options,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    templates = load_templates(templates_path)
    templates.insert(0, entry)
    save_templates(templates_path, templates)
    logger.info(f"Saved template {entry['id']} ({name!r})")
    return entry


def find_template(templates_path: Path, template_id: str) -> dict | None:
    """Return the template with *template_id*, or ``None``."""
    return next(
        (entry for entry in load_templates(templates_path) if entry["id"] == template_id),
        None,
    )


def delete_template(templates_path: Path, template_id: str) -> bool:
    """Remove the template with *template_id*.

    Returns:
        ``True`` if a template was removed, ``False`` if none matched.
    """
    templates = load_templates(templates_path)
    remaining = [entry for entry in templates if entry["id"] != template_id]
    if len(remaining) == len(templates):
        return False
    save_templates(templates_path, remaining)
    logger.info(f"Deleted template {template_id}")
    return True
