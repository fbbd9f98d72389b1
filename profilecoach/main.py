import logging

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import load_settings
from .errors import AnalysisError
from .gemini import generate_analysis
from .interpreter import interpret
from .profiles import fetch_profile
from .prompts import build_profile_prompt
from .schemas import AnalysisResult, AnalyzeRequest, InterpretRequest

_settings = load_settings()
logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# --- Rate limiting ---
RATE_LIMIT_PER_IP = _settings.rate_limit_per_ip

limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="Profile Coach")
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded. Please slow down and try again later."},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalysisResult)
@limiter.limit(RATE_LIMIT_PER_IP)
async def analyze(request: Request, body: AnalyzeRequest):
    # --- Fetch profile, render prompt, call Gemini ---
    try:
        profile = await fetch_profile(body.profile)
        narrative = await generate_analysis(build_profile_prompt(profile))
    except AnalysisError as exc:
        logger.info("Analysis of %r failed: %s", body.profile, exc.message)
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    except Exception as exc:
        logger.exception("Unexpected error during profile analysis")
        raise HTTPException(
            status_code=502,
            detail="Analysis failed due to an upstream error. Please try again.",
        ) from exc

    # --- Interpret the narrative ---
    return interpret(narrative)


@app.post("/interpret", response_model=AnalysisResult)
async def interpret_narrative(body: InterpretRequest):
    max_chars = load_settings().max_narrative_chars
    if len(body.text) > max_chars:
        raise HTTPException(
            status_code=400,
            detail=f"Narrative text must be at most {max_chars} characters.",
        )
    return interpret(body.text)
