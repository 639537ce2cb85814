from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
import logging
from dotenv import load_dotenv

from db import init_db
from ranking.logic.constants import ENGINE_VERSION
from ranking.routes import router as courses_router
from settings_routes import router as settings_router

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logging.info(f"Course Ranking Service {ENGINE_VERSION} starting")

app = FastAPI(title="Course Ranking Service", version=ENGINE_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()

app.include_router(courses_router)
app.include_router(settings_router)


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok"}
