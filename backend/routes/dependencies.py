"""Request-scoped access to the collaborators built at startup."""

from fastapi import Request

from services.aggregator import Aggregator


def get_aggregator(request: Request) -> Aggregator:
    return request.app.state.aggregator
