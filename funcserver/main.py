"""Example application served through the ALB adapter.

An ordinary FastAPI app; nothing in it knows about Lambda. The same app
runs locally under any ASGI server, e.g. `uvicorn funcserver.main:app`.
"""

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from funcserver.alb.request import get_elb

VERSION = "0.1.0"

LINKS = '<a href="/">Home</a><br/><a href="/products">Products</a><br/><a href="/articles">Articles</a><br/>'

app = FastAPI(
    title="funcserver example",
    description="Example app served from an ALB-triggered Lambda function",
    version=VERSION,
)


def _page(title: str) -> HTMLResponse:
    return HTMLResponse(f"<h1>{title}</h1>{LINKS}")


@app.get("/")
async def home():
    return _page("Home")


@app.get("/products")
async def products():
    return _page("Products")


@app.get("/articles")
async def articles():
    return _page("Articles")


@app.get("/health")
async def health(request: Request):
    # Only present when the request came through the load balancer
    ctx = request.scope.get("extensions", {}).get("aws.context")
    elb = get_elb(ctx) if ctx is not None else None
    return {
        "status": "healthy",
        "version": VERSION,
        "target_group_arn": elb.target_group_arn if elb else None,
    }
