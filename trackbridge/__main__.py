"""Allow ``python -m trackbridge``."""

import sys

from trackbridge.infrastructure.cli.app import main

sys.exit(main())
