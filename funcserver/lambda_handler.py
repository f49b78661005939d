"""AWS Lambda entry point.

The ALB adapter translates load balancer events into requests for the
example FastAPI app and converts its responses back, so the app runs
unchanged behind an Application Load Balancer.
"""

from funcserver.alb.handler import wrap_http_handler
from funcserver.alb.response import ResponseOptions
from funcserver.http.asgi import ASGIHandler
from funcserver.logging.structured import setup_logging
from funcserver.main import app

setup_logging()

handler = wrap_http_handler(ASGIHandler(app), ResponseOptions.from_settings())
