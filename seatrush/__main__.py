import sys

from seatrush.cli import main

sys.exit(main())
