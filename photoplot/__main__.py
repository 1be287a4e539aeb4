import sys

from photoplot.cli import main

sys.exit(main())
