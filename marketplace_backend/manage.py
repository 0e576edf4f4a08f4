"""
PATH: manage.py

Django management entrypoint.

Settings module resolution:
- `manage.py test` runs against backend.settings.test.
- If DJANGO_SETTINGS_MODULE is unset OR set to the settings *package*
  ("backend.settings"), fall back to a concrete module ("backend.settings.dev").
  The package __init__ loads nothing, so pointing at it leaves INSTALLED_APPS empty.

Production must set DJANGO_SETTINGS_MODULE=backend.settings.prod explicitly.
"""

from __future__ import annotations

import os
import sys


def _ensure_settings_module(argv) -> None:
    current = (os.environ.get("DJANGO_SETTINGS_MODULE") or "").strip()

    if len(argv) > 1 and argv[1] == "test" and not current:
        os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.test"
        return

    if not current or current == "backend.settings":
        os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.dev"


def main() -> None:
    _ensure_settings_module(sys.argv)

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
