# backend/quiz_api/app.py

import json, logging
from typing import Optional
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from dotenv import load_dotenv

from quiz_api.core.schemas import QuestionsResponse, ScoreResponse
from quiz_api.core.notion_store import fetch_questions, parse_count, parse_lectures
from quiz_api.core.scoring import EmptySubmissionError, score_submission

# ------------------------------------------------------------
# Setup
# ------------------------------------------------------------
load_dotenv()
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("quiz")

app = FastAPI(title="Notion Quiz API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware to log requests
class LogRequestMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            body = await request.body()
            logger.info(
                f"Incoming {request.method} {request.url.path} body={body.decode('utf-8', 'replace')}"
            )
        except Exception:
            logger.warning("Could not read request body")
        return await call_next(request)

app.add_middleware(LogRequestMiddleware)

# ------------------------------------------------------------
# Exception handlers
# ------------------------------------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": str(exc)})

# ------------------------------------------------------------
# Routes
# ------------------------------------------------------------
@app.get("/get-questions", response_model=QuestionsResponse)
async def get_questions(
    count: Optional[str] = Query(None),
    lectures: Optional[str] = Query(None),
):
    n = parse_count(count)
    lecture_ids = parse_lectures(lectures)
    try:
        return await fetch_questions(lectures=lecture_ids, count=n)
    except Exception as e:
        logger.error("Exception during fetch_questions", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@app.post("/score-quiz", response_model=ScoreResponse)
async def score_quiz(request: Request):
    try:
        raw = await request.body()
        payload = json.loads(raw or b"{}")
        items = payload.get("items") if isinstance(payload, dict) else None
        result = score_submission(items)
    except EmptySubmissionError as e:
        logger.warning("Rejected empty submission")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Exception during score_submission", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return result

@app.get("/healthz")
def healthz():
    return {"ok": True}
