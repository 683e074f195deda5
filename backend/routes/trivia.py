"""Trivia question serving and sheet import."""

import logging
import os

from fastapi import APIRouter, HTTPException

from backend import storage
from dad_arcade.trivia import TriviaError, fetch_trivia_csv, parse_trivia_csv

from .models import TriviaRefreshBody

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/trivia")
@router.get("/trivia/{category}")
async def get_trivia(category: str = "general"):
    """A random question in the category (any category if it has none)."""
    question = storage.random_question(category)
    if question is None:
        raise HTTPException(404, "No trivia questions available")
    return question


@router.post("/trivia/refresh")
async def refresh_trivia(body: TriviaRefreshBody | None = None):
    """Import questions from inline CSV text or the configured sheet URL."""
    body = body or TriviaRefreshBody()
    if body.csv_text:
        try:
            questions = parse_trivia_csv(body.csv_text)
        except TriviaError as e:
            raise HTTPException(422, str(e))
    else:
        url = body.url or storage.get_config()["trivia_csv_url"] or os.getenv("TRIVIA_CSV_URL", "")
        if not url:
            raise HTTPException(400, "No trivia CSV URL configured")
        try:
            questions = await fetch_trivia_csv(url)
        except TriviaError as e:
            logger.warning("Trivia import failed: %s", e)
            raise HTTPException(502, str(e))

    if not questions:
        return {"message": "No valid questions processed from CSV.", "upserted": 0}
    count = storage.upsert_trivia(questions)
    return {"message": "Trivia questions updated successfully!", "upserted": count}
