import sys

from davpublish.cli import main

sys.exit(main())
