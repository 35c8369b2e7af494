"""Allow ``python -m vmservice_mdns``."""

from __future__ import annotations

import sys

from vmservice_mdns.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
