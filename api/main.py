"""
aispend REST API - FastAPI application for AI spend tracking.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from aispend import __version__
from aispend.config import list_prices, load_settings
from aispend.connect import PROVIDER_NAMES, SUPPORTED_PROVIDERS
from aispend.connect.unsupported import UNSUPPORTED_MESSAGES
from aispend.see import DEFAULT_SUBSCRIPTIONS, SpendAggregator, Subscription

logger = logging.getLogger(__name__)

settings = load_settings()

# FastAPI app
app = FastAPI(
    title="aispend API",
    description="AI API spend tracker - usage from every provider plus subscriptions",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

FETCH_FAILED = "Failed to fetch usage data"


# Request/Response models
class UsageRequest(BaseModel):
    """Provider credentials for one usage fetch. Keys are never stored."""
    keys: dict[str, Any] = Field(
        ...,
        description=(
            "Provider id to API key, e.g. {\"anthropic\": \"sk-ant-...\"}. "
            "Empty or non-string keys are skipped"
        ),
    )


class SubscriptionModel(BaseModel):
    """A monthly subscription fee."""
    name: str
    monthly_cost: float = Field(..., ge=0)
    enabled: bool = True


class SummaryRequest(UsageRequest):
    """Usage fetch plus subscriptions and manually entered API spend."""
    subscriptions: list[SubscriptionModel] = Field(default_factory=list)
    manual_spend: dict[str, float] = Field(
        default_factory=dict,
        description="Label to amount in USD, for spend the usage APIs can't report",
    )


# Helper functions
def get_aggregator() -> SpendAggregator:
    """Create aggregator using the configured HTTP timeout."""
    return SpendAggregator(timeout=settings.http_timeout)


async def parse_body(request: Request, model: type[BaseModel]) -> Optional[BaseModel]:
    """Parse and validate a JSON body, or None if it is malformed."""
    try:
        return model.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning("Malformed %s body: %s", model.__name__, e)
        return None


def failure_response() -> JSONResponse:
    return JSONResponse({"error": FETCH_FAILED}, status_code=500)


# Routes
@app.get("/")
async def root():
    """API root - health check and info."""
    return {
        "name": "aispend API",
        "version": __version__,
        "description": "AI API spend tracker",
        "endpoints": {
            "usage": "/usage",
            "summary": "/summary",
            "providers": "/providers",
            "pricing": "/pricing",
            "subscriptions": "/subscriptions",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.post("/usage")
async def fetch_usage(request: Request):
    """Fetch 30-day usage for every provider with a key."""
    body = await parse_body(request, UsageRequest)
    if body is None:
        return failure_response()

    try:
        usage = await get_aggregator().aggregate(body.keys)
    except Exception as e:
        logger.error("Usage API error: %s", e)
        return failure_response()

    return {"usage": [r.to_dict() for r in usage]}


@app.post("/summary")
async def fetch_summary(request: Request):
    """Fetch usage and combine it with subscriptions and manual spend."""
    body = await parse_body(request, SummaryRequest)
    if body is None:
        return failure_response()

    aggregator = get_aggregator()
    try:
        usage = await aggregator.aggregate(body.keys)
    except Exception as e:
        logger.error("Summary API error: %s", e)
        return failure_response()

    summary = aggregator.get_summary(
        usage,
        subscriptions=[
            Subscription(s.name, s.monthly_cost, s.enabled)
            for s in body.subscriptions
        ],
        manual_spend=body.manual_spend,
    )

    return {
        "usage": [r.to_dict() for r in usage],
        "summary": summary.to_dict(),
    }


@app.get("/providers")
async def get_providers():
    """List supported providers and whether their usage API is available."""
    return {
        "providers": [
            {
                "id": provider,
                "name": PROVIDER_NAMES[provider],
                "usage_api": provider not in UNSUPPORTED_MESSAGES,
                "note": UNSUPPORTED_MESSAGES.get(provider),
            }
            for provider in SUPPORTED_PROVIDERS
        ],
    }


@app.get("/pricing")
async def get_pricing(
    provider: Optional[str] = Query(None, description="Only this provider's models"),
):
    """Get the per-1K-token pricing reference."""
    return {
        "unit": "USD per 1K tokens",
        "note": "Prices are approximate; unknown models use a per-provider default",
        "providers": {
            name: {
                model: {"input": price.input, "output": price.output}
                for model, price in models.items()
            }
            for name, models in list_prices(provider).items()
        },
    }


@app.get("/subscriptions")
async def get_subscriptions():
    """Common AI subscriptions, for pre-filling a subscription picker."""
    return {
        "subscriptions": [
            {"name": s.name, "monthly_cost": s.monthly_cost}
            for s in DEFAULT_SUBSCRIPTIONS
        ],
    }


# Run with: uvicorn api.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
