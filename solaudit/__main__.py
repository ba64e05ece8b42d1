"""Allow ``python -m solaudit``."""

import sys

from solaudit.cli import main

sys.exit(main())
