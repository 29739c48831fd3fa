import sys

from leaktask.cli import main

sys.exit(main())
