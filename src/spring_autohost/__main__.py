"""Allow running as: python -m spring_autohost"""

import sys

from .cli import main

sys.exit(main())
