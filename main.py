# FILE: main.py
"""
AstroScope Backend - FastAPI Application
Version: 0.3.0

Features:
- Ranked keyword search over the lessons-learned corpus
- Grounded answers from Gemini (or OpenAI) with [Lesson <id>] citations
- Chunked SSE delivery of answers
- Deterministic fallback answers when generation fails or times out
- Follow-up question suggestions
- Citation follow-through to the full lesson record
"""
import os

from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from astroscope import __version__
from astroscope.chat.router import router as chat_router
from astroscope.config import CORPUS_SOURCE, SEED_PATH
from astroscope.db import SessionLocal, init_db
from astroscope.errors import CorpusLoadError, CorpusUnavailableError
from astroscope.lessons.router import router as lessons_router
from astroscope.services import AppServices, get_services, init_services

app = FastAPI(
    title="AstroScope",
    version=__version__,
    description="Mission lessons-learned assistant with grounded, cited answers",
)

# ====== CORS ======

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8081",
        "http://localhost:19006",
        "http://127.0.0.1:8081",
        "http://127.0.0.1:19006",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== ERRORS ======

@app.exception_handler(CorpusUnavailableError)
async def corpus_unavailable_handler(request: Request, exc: CorpusUnavailableError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    os.makedirs("data", exist_ok=True)

    print(f"[startup] Loading lesson corpus (source={CORPUS_SOURCE})...")
    db = None
    if CORPUS_SOURCE == "database":
        init_db()
        db = SessionLocal()
    try:
        services = init_services(db=db, source=CORPUS_SOURCE, seed_path=SEED_PATH)
    except CorpusLoadError as e:
        # Search endpoints answer 503 until the corpus is fixed
        print(f"[startup] Corpus: [X] FAILED TO LOAD - {e}")
        return
    finally:
        if db is not None:
            db.close()

    print(f"[startup] Corpus: [OK] {len(services.corpus)} lessons")

    print("[startup] Checking generation provider...")
    if services.api_configured:
        print(f"[startup] {services.provider} ({services.model}): [OK] API key set")
    else:
        print(f"[startup] {services.provider} ({services.model}): [X] API key NOT SET - answers will use the fallback")


# ====== ROUTERS ======

app.include_router(lessons_router)
app.include_router(chat_router)


# ====== STATUS ======

class StatusResponse(BaseModel):
    version: str
    provider: str
    model: str
    api_configured: bool
    corpus_source: str
    corpus_size: int


@app.get("/status", response_model=StatusResponse)
def get_status(services: AppServices = Depends(get_services)):
    """Configuration and corpus summary."""
    return StatusResponse(
        version=__version__,
        provider=services.provider,
        model=services.model,
        api_configured=services.api_configured,
        corpus_source=services.corpus_source,
        corpus_size=len(services.corpus),
    )
