import sys

from ringsync.cli import main

sys.exit(main())
