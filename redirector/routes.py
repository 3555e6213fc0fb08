# redirector/routes.py

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response

from redirector.classifier import Classifier, Decision, Outcome
from redirector.config import Settings
from redirector.schemas import ClassificationResult, DebugReport
from redirector.useragent import UserAgentFacts, parse_user_agent

logger = logging.getLogger(__name__)

router = APIRouter()

FALLBACK_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p><a href="{app_store_url}">Download on the App Store</a></p>
<p><a href="{play_store_url}">Get it on Google Play</a></p>
</body>
</html>
"""


def redirect_url(outcome: Outcome, settings: Settings) -> Optional[str]:
    if outcome is Outcome.REDIRECT_TO_APP_STORE:
        return settings.app_store_url
    if outcome is Outcome.REDIRECT_TO_PLAY_STORE:
        return settings.play_store_url
    return None


def decide(request: Request, user_agent: Optional[str] = None) -> tuple[UserAgentFacts, Decision]:
    """Parse the request's user agent and classify it"""
    if user_agent is None:
        user_agent = request.headers.get("user-agent", "")

    facts = parse_user_agent(user_agent)
    classifier: Classifier = request.app.state.classifier
    decision = classifier.classify(facts)

    logger.debug(f"{decision.outcome.value} for {decision.platform.value} {decision.version:.2f}: {facts.raw_ua!r}")
    return facts, decision


@router.get("/")
async def root(request: Request) -> Response:
    """Redirect to the matching store or show the fallback page"""
    settings: Settings = request.app.state.settings
    _, decision = decide(request)

    url = redirect_url(decision.outcome, settings)
    if url:
        return RedirectResponse(url, status_code=302)

    return HTMLResponse(
        FALLBACK_PAGE.format(
            title=settings.fallback_title,
            app_store_url=settings.app_store_url,
            play_store_url=settings.play_store_url,
        )
    )


@router.get("/debug", response_class=PlainTextResponse)
async def debug(request: Request) -> str:
    """Same decision as the root route, echoed as text instead of redirecting"""
    settings: Settings = request.app.state.settings
    if not settings.debug_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    start = time.perf_counter()
    facts, decision = decide(request)

    report = DebugReport(
        full_ua=facts.raw_ua,
        is_mobile=facts.mobile_flag,
        is_bot=facts.bot,
        platform=facts.platform,
        os=facts.os,
        engine_name=facts.engine[0],
        engine_version=facts.engine[1],
        browser_name=facts.browser[0],
        browser_version=facts.browser[1],
    )

    lines = [report.render(), decision.reason, "----------------- EOF DEBUG --------------\n"]

    if decision.outcome is Outcome.REDIRECT_TO_APP_STORE:
        lines.append(f"Redirect to Apple App store:  {settings.app_store_url}")
    elif decision.outcome is Outcome.REDIRECT_TO_PLAY_STORE:
        lines.append(f"Redirect to Google Play store:  {settings.play_store_url}")
    else:
        lines.append("Display custom page")

    lines.append(f"Duration:  {(time.perf_counter() - start) * 1000:.3f}ms")
    return "\n".join(lines) + "\n"


@router.get("/api/classify", response_model=ClassificationResult)
async def classify_request(request: Request, ua: Optional[str] = None) -> ClassificationResult:
    """Classification as JSON. The `ua` query parameter overrides the header."""
    settings: Settings = request.app.state.settings
    _, decision = decide(request, ua)

    return ClassificationResult(
        outcome=decision.outcome,
        platform=decision.platform,
        version=decision.version,
        redirect_url=redirect_url(decision.outcome, settings),
    )


@router.get("/health")
async def health_check():
    """Simple health check endpoint"""
    return {"status": "healthy"}
