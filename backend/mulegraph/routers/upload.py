"""
Upload router for MuleGraph API.
"""

import logging
from io import StringIO

import pandas as pd
from fastapi import APIRouter, UploadFile, File, HTTPException
from starlette.concurrency import run_in_threadpool

from mulegraph.config import MAX_FILE_SIZE_BYTES, MAX_FILE_SIZE_MB
from mulegraph.models.schemas import AnalysisResponse
from mulegraph.services.analyzer import analyze
from mulegraph.utils.csv_validator import validate_csv


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", response_model=AnalysisResponse)
async def upload_csv(file: UploadFile = File(...)) -> AnalysisResponse:
    """Upload and analyze a CSV file of transactions."""

    if not file.filename or not file.filename.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    # Read at most one byte past the limit so oversized uploads stop early.
    contents = await file.read(MAX_FILE_SIZE_BYTES + 1)
    if len(contents) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {MAX_FILE_SIZE_MB} MB upload limit",
        )

    logger.info("Processing file: %s, size: %d", file.filename, len(contents))
    try:
        csv_text = contents.decode("utf-8")
        df = pd.read_csv(StringIO(csv_text), dtype=str)
    except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.warning("Parse error for %s: %s", file.filename, e)
        raise HTTPException(status_code=400, detail=f"Failed to parse CSV: {str(e)}")

    validation_result = validate_csv(df)
    if not validation_result["valid"]:
        logger.info("Validation failed with %d errors", len(validation_result["errors"]))
        raise HTTPException(
            status_code=400,
            detail={
                "message": "CSV validation failed",
                "errors": validation_result["errors"],
            },
        )
    for warning in validation_result["warnings"]:
        logger.warning(warning)

    return await run_in_threadpool(analyze, validation_result["transactions"])
