"""Entry point for ``python -m constprop``."""

import sys

from constprop.main import main

sys.exit(main())
