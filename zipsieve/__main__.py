import sys

from zipsieve.cli import main

sys.exit(main())
