from datetime import datetime

from fastapi import FastAPI

from app.config import get_settings
from app.qinglong import initialize_qinglong_client, get_qinglong_client, close_qinglong_client
from app.dingtalk_bot.bot import start_bot, shutdown_bot, is_bot_registered

app = FastAPI(
    title="QingLong Env Bot",
    description="DingTalk robot for managing QingLong environment variables",
    version="0.1.0"
)


# Lifecycle events
@app.on_event("startup")
async def startup_event():
    """Initialize QingLong client and DingTalk bot on startup."""
    print("[STARTUP] Initializing QingLong client...")
    # Missing QingLong configuration is fatal: InitializationError aborts startup
    initialize_qinglong_client(get_settings())
    print("[STARTUP] Starting DingTalk bot...")
    await start_bot()
    print("[STARTUP] Ready")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown bot and HTTP clients on application shutdown."""
    print("[SHUTDOWN] Shutting down DingTalk bot...")
    bot_running = is_bot_registered()
    await shutdown_bot()
    if not bot_running:
        # Otherwise the stream thread closes it on the loop it used
        await close_qinglong_client()
    print("[SHUTDOWN] Stopped")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    session = get_qinglong_client().session_manager.session
    token_expires_at = None
    if session:
        token_expires_at = datetime.fromtimestamp(session.expires_at_ms / 1000).isoformat()

    return {
        "status": "ok",
        "environment": settings.environment,
        "bot_registered": is_bot_registered(),
        "qinglong_token_expires_at": token_expires_at,
        "version": "0.1.0"
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "QingLong Env Bot",
        "docs": "/docs"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
