import sys

from real_price.cli.main import main

sys.exit(main())
