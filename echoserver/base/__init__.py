#
# PURPOSE:
# Foundational pieces the server is built on.
#
# WHAT'S IN THIS MODULE:
# - config.py: Bind address, CORS policy, logging settings
#
