import sys

from enspublish.cli import main

sys.exit(main())
