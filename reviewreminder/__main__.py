import sys

from reviewreminder.cli import main

sys.exit(main())
