"""Allow ``python -m hcdev``."""
import sys

from .cli import main

sys.exit(main())
