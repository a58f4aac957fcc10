"""
`python -m expo_updates_setup` entrypoint.

This is mainly for convenience; the installed console script `expo-updates-setup`
calls the same `expo_updates_setup.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
