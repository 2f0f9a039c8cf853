from .greeting_service import (
    GreetService,
    GreetingState,
    MissingGreetingField,
    RequestCounter,
    get_greet_service,
)

__all__ = [
    "GreetService",
    "GreetingState",
    "MissingGreetingField",
    "RequestCounter",
    "get_greet_service",
]
