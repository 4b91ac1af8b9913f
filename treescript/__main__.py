import sys

from treescript.cli import main

sys.exit(main())
