"""
FastAPI routers for all API endpoints.

- health: public liveness and status endpoints (GET /health, GET /)
- chat: the chat widget endpoints (GET /chat, POST /chat)
"""
