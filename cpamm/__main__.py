import sys

from cpamm.cli import main

sys.exit(main())
