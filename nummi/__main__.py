"""Allows running nummi as `python -m nummi`."""

import sys

from nummi.cli import main

sys.exit(main())
