import sys

from shortfall.cli import main

sys.exit(main())
