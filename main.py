"""Run the Linguala API with uvicorn, reloading on change in debug mode."""
import uvicorn

from linguala.config import settings

if __name__ == "__main__":
    print(f"Starting {settings.app_name} v{settings.version} ({settings.environment.value})")
    print(f"Debug mode: {settings.debug}")
    print(f"Database: {settings.db.url.split('@')[-1] if '@' in settings.db.url else settings.db.url}")
    print(f"DashScope key configured: {bool(settings.dashscope.api_key)}")
    print("-" * 50)

    uvicorn.run(
        "linguala.api:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        reload_dirs=["linguala", "ai", "config"] if settings.debug else None,
        log_level=settings.logging.level.lower(),
    )
