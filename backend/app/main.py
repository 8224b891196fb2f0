import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import SessionLocal
from .redis_client import redis_client
from .routers import provider_bookings, provider_messages, provider_profile, provider_slots, public
from .services.errors import BookingError

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    tasks: list[asyncio.Task] = []

    if settings.notification_worker_enabled:
        from .services.notifications.consumer import notification_consumer_loop, retry_queue_loop
        from .services.retry_checker import retry_checker_loop

        tasks.append(asyncio.create_task(
            notification_consumer_loop(settings.redis_url, settings.notification_queue)
        ))
        tasks.append(asyncio.create_task(
            retry_queue_loop(settings.redis_url, settings.notification_queue)
        ))
        if settings.retry_interval_seconds > 0:
            tasks.append(asyncio.create_task(retry_checker_loop()))
        logger.info(f"Notification worker started ({len(tasks)} tasks)")

    yield

    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


app = FastAPI(title="Booking API", lifespan=lifespan)

app.include_router(public.router)
app.include_router(provider_profile.router)
app.include_router(provider_slots.router)
app.include_router(provider_bookings.router)
app.include_router(provider_messages.router)


@app.exception_handler(BookingError)
async def booking_error_handler(_: Request, exc: BookingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/health")
def health():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.error(f"Health: database unavailable: {e}")
        db_ok = False
    finally:
        db.close()

    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.error(f"Health: redis unavailable: {e}")
        redis_ok = False

    return {"database": db_ok, "redis": redis_ok}
