#!/usr/bin/env python3
"""
Run expo-updates-setup straight from a source checkout, e.g. from the root of
an Expo app that vendors this repository:

  python3 path/to/expo_updates_setup.py -p android --project-dir .
  python3 path/to/expo_updates_setup.py -p all --non-interactive
"""

import os
import sys

_HERE = os.path.dirname(os.path.abspath(__file__))
_SRC = os.path.join(_HERE, "src")
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

# `import expo_updates_setup` from the repository root resolves to this file;
# point its package path at `src/expo_updates_setup/` so submodules still load.
__path__ = [os.path.join(_SRC, "expo_updates_setup")]


def main(argv: list[str] | None = None) -> int:
    from expo_updates_setup.cli import main as cli_main

    return cli_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
