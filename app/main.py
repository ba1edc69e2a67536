from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

# Configure base logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("app")

from app.routers import (
    courts,
    bookings,
    guest_bookings,
    recurring_schedules,
)
from app.database import engine, Base
from app import models  # noqa: F401  registra los modelos en Base.metadata
import uvicorn

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Arena API",
    description="API for court availability, bookings and recurring schedules",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(courts.router, prefix="/courts", tags=["courts"])
app.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
app.include_router(
    guest_bookings.router, prefix="/guest-bookings", tags=["guest-bookings"]
)
app.include_router(
    recurring_schedules.router,
    prefix="/recurring-schedules",
    tags=["recurring-schedules"],
)


@app.get("/")
def read_root():
    return {"message": "Welcome to Arena API"}


# Global unhandled exception handler -> logs ERROR
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error | path=%s | method=%s | client=%s",
        request.url.path,
        request.method,
        request.client.host if request.client else "unknown",
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=5009, reload=True)
