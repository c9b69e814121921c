"""HTTP endpoints exposing the compatibility layer (normalize, report, synonyms).

Every call goes through the process-wide ResponseHandler so the error counter
and synonym table seen by /report and /synonyms match what /normalize uses.
"""

from typing import Dict, List
import logging

from fastapi import APIRouter, HTTPException

from app.compat.handler import response_handler
from app.compat.schemas import ErrorReport, NormalizeRequest, SynonymRegistration

logger = logging.getLogger("compat.api")
router = APIRouter()


@router.post(
    "/normalize",
    summary="Normalize one raw upstream API response",
    responses={500: {"description": "Processing failed and fallback was disabled"}},
)
def normalize_response(body: NormalizeRequest):
    try:
        result = response_handler.handle_api_response(body.response, body.options)
    except Exception as exc:
        logger.warning("normalize_failed fallback=0 err=%s", exc)
        raise HTTPException(500, "normalization_error")
    logger.info(
        "normalize_done issues=%d error_count=%d",
        len(result.validation.issues),
        response_handler.error_count,
    )
    return result.as_dict()


@router.get("/report", response_model=ErrorReport)
def error_report():
    return response_handler.generate_error_report()


@router.get("/synonyms", response_model=Dict[str, List[str]])
def list_synonyms():
    return response_handler.validator.field_mappings


@router.post("/synonyms", response_model=List[str])
def register_synonym(body: SynonymRegistration):
    try:
        candidates = response_handler.validator.register_synonym(body.field, body.path, body.priority)
    except ValueError as ve:
        logger.warning("synonym_rejected field=%s path=%r err=%s", body.field, body.path, ve)
        raise HTTPException(400, "invalid_synonym")
    logger.info("synonym_registered field=%s path=%s", body.field, body.path)
    return candidates
