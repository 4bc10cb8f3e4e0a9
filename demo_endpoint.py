"""
Quick demo script to run the Lava Show chat server locally.

This script starts a local server and shows how to make requests to the endpoint.
"""

import uvicorn

from lavashow_chat.config import settings

if __name__ == "__main__":
    base_url = f"http://localhost:{settings.PORT}"

    print("=" * 60)
    print("Starting Lava Show Chat Backend Demo")
    print("=" * 60)
    print()
    print("📌 API Endpoints:")
    print(f"   - Health Check:  GET  {base_url}/health")
    print(f"   - Status:        GET  {base_url}/")
    print(f"   - Chat:          POST {base_url}/chat")
    print(f"   - API Docs:           {base_url}/docs")
    print()
    print("🔐 Authentication:")
    print("   POST /chat requires the widget key:")
    print("   x-api-key: <API_KEY>")
    print()
    print("📝 Test with curl:")
    print(f'   curl -X POST "{base_url}/chat" \\')
    print('     -H "Content-Type: application/json" \\')
    print('     -H "x-api-key: $API_KEY" \\')
    print('     -d \'{"message": "How much for 2 adults and 1 child?"}\'')
    print()
    print("=" * 60)
    print(f"Starting server on {base_url}")
    print("Press Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(
        "lavashow_chat.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )
