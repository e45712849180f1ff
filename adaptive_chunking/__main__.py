"""Allow running the CLI with ``python -m adaptive_chunking``."""

import sys

from .cli import main

sys.exit(main())
