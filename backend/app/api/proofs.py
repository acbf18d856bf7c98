"""
Proof Submission Router.

POST /api/submitProofToContract

    Body → ProofSubmission → JwtProof → simulate → submit → confirm → 200

Response mapping:
    405  any method other than POST (Allow: POST, plain text)
    400  unparseable JSON, missing proof/pub_signals, malformed submission
    500  any failure from the chain pipeline (stage + tx hash when known)
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.crypto.jwt_proof import ProofFormatError, build_jwt_proof
from app.infrastructure.blockchain.web3_service import (
    BlockchainError,
    JwtVerifierService,
    get_service,
    UNKNOWN_ERROR,
)
from app.schemas.zkp import ProofSubmission, SubmissionErrorResponse, SubmissionResponse

logger = logging.getLogger(__name__)

proofs_router = APIRouter(prefix="/api", tags=["Proofs"])

SUBMIT_PATH = "/submitProofToContract"
SUBMIT_URL = f"{proofs_router.prefix}{SUBMIT_PATH}"
ALLOWED_METHODS = ["POST"]
SUBMIT_FAILED = "Failed to submit proof to contract"


def _bad_request(error: str, message: str = None) -> JSONResponse:
    content = {"error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@proofs_router.post(
    SUBMIT_PATH,
    response_model=SubmissionResponse,
    responses={
        400: {"model": SubmissionErrorResponse},
        500: {"model": SubmissionErrorResponse},
    },
)
async def submit_proof_to_contract(
    request: Request,
    service: JwtVerifierService = Depends(get_service),
):
    """
    Relay a JWT Groth16 proof to JwtVerifier.verifyEmailProof.

    The body is parsed by hand so that a missing proof or signal list is
    reported as 400 with the same message the frontend already handles.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return _bad_request("Request body is not valid JSON", str(e))
    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")

    logger.info(f"[PROOF] Submission received with fields {sorted(body.keys())}")

    if not body.get("proof") or not body.get("pub_signals"):
        return _bad_request("Missing proof or pub_signals in request body")

    try:
        submission = ProofSubmission.model_validate(body)
        jwt_proof = build_jwt_proof(
            submission.pub_signals,
            submission.proof,
            submission.header,
            submission.payload,
        )
    except (ValidationError, ProofFormatError) as e:
        logger.warning(f"[PROOF] Malformed submission: {e}")
        return _bad_request("Malformed proof submission", str(e))

    logger.info(f"[PROOF] JWT proof: {jwt_proof.to_dict()}")

    try:
        result = await service.submit_proof(jwt_proof)
    except BlockchainError as e:
        logger.error(f"[PROOF] Error submitting proof to contract ({e.stage.value}): {e}")
        content = SubmissionErrorResponse(
            error=SUBMIT_FAILED,
            message=str(e),
            stage=e.stage.value,
            transactionHash=e.tx_hash,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content.model_dump(exclude_none=True),
        )
    except Exception as e:
        logger.exception(f"[PROOF] Unexpected error submitting proof to contract: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": SUBMIT_FAILED, "message": str(e) or UNKNOWN_ERROR},
        )

    return SubmissionResponse(
        message="Proof submitted successfully",
        transactionHash=result.tx_hash,
        blockNumber=str(result.block_number),
    )


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """
    Plain-text 405 with `Allow: POST` for every non-POST verb on the submit
    route. Other HTTP errors keep FastAPI's JSON body.
    """
    if (
        exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        and request.url.path == SUBMIT_URL
    ):
        return PlainTextResponse(
            f"Method {request.method} Not Allowed",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": ", ".join(ALLOWED_METHODS)},
        )
    return await http_exception_handler(request, exc)
