import sys

from echoserver.cli import main

sys.exit(main())
