import sys

from sizemic.cli import main

sys.exit(main())
