import sys

from stressdp.cli import main

sys.exit(main())
