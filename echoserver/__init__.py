# ============================================================================
# echoserver/__init__.py
# Package Marker
# ============================================================================
#
# PURPOSE:
# A tiny HTTP server: two static greetings, an echo endpoint, and a CORS
# policy for a single browser origin.
#
# LAYOUT:
# - base/config.py: settings, env loading, logging setup
# - errors.py: error codes and EchoServerError
# - server/: FastAPI app, CORS middleware, routers, uvicorn bootstrap
# - cli.py: command line entry point
#
# ============================================================================

__version__ = "0.1.0"
