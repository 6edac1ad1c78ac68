import sys

from luna.main import main

sys.exit(main())
