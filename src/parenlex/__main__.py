import sys

from parenlex.cli import main

sys.exit(main())
