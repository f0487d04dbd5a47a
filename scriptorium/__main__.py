import sys

from scriptorium.cli import main

sys.exit(main())
