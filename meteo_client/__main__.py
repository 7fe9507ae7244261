import sys

from meteo_client.cli import main

sys.exit(main())
