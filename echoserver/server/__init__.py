# ============================================================================
# echoserver/server/__init__.py
# Server Package - FastAPI Web Server
# ============================================================================
#
# WHAT THE SERVER DOES:
# - **Greetings**: GET / and GET /hey answer with fixed text
# - **Echo**: POST /echo answers with the request body, byte for byte
# - **CORS**: Lets one browser origin (http://localhost:3000) read responses
# - **404**: Anything else, including a known path with the wrong method
#
# KEY MODULES:
# - **api.py**: App factory, CORS middleware, not-found policy, serve()
# - **routers/**: The three handlers
#
# ============================================================================
