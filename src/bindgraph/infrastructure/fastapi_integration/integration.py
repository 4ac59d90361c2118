from typing import Any, Awaitable, Callable, Union

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from bindgraph.application import Configuration, Injector
from bindgraph.domain import ClassNode, IInjector

Target = Union[ClassNode, str]


def create_fastapi_dependency(injector: IInjector, target: Target) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from an injector.

    Singleton targets of the configuration are shared across calls because the
    injector's cache outlives the request.

    Args:
        injector: The injector to resolve from.
        target: Class node or fully-qualified name to resolve.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> injector = Injector(configuration)
        >>> get_store = create_fastapi_dependency(injector, "app.JobStore")
        >>>
        >>> @app.get("/jobs")
        >>> async def list_jobs(store=Depends(get_store)):
        ...     return store.list()
    """

    def dependency() -> Any:
        """Resolve the target from the injector."""
        return injector.get_instance(target)

    return dependency


def create_request_dependency(target: Target) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the request's injector.

    Requires the InjectorMiddleware to be installed.

    Args:
        target: Class node or fully-qualified name to resolve.

    Returns:
        A callable that resolves from the request-scoped injector.

    Example:
        >>> app.add_middleware(InjectorMiddleware, configuration=configuration)
        >>>
        >>> get_handler = create_request_dependency("app.JobHandler")
        >>>
        >>> @app.post("/jobs")
        >>> async def submit(handler=Depends(get_handler)):
        ...     return handler.submit()
    """

    def request_dependency(request: Request) -> Any:
        """Resolve from the request's injector."""
        if not hasattr(request.state, "injector"):
            raise RuntimeError("Request does not have an injector. Did you forget to add InjectorMiddleware?")
        injector: IInjector = request.state.injector
        return injector.get_instance(target)

    return request_dependency


class InjectorMiddleware(BaseHTTPMiddleware):
    """Middleware that creates one injector per request.

    Every request gets a fresh injector over the shared, immutable
    configuration, so singletons are scoped to the request. The injector is
    available as `request.state.injector`.

    Attributes:
        configuration: The configuration injectors are built from.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(InjectorMiddleware, configuration=configuration)
    """

    def __init__(self, app: FastAPI, configuration: Configuration):
        """Initialize the middleware with a configuration.

        Args:
            app: The FastAPI/Starlette application.
            configuration: The configuration to build request injectors from.
        """
        super().__init__(app)
        self.configuration = configuration

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach a fresh injector to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.injector = Injector(self.configuration)
        try:
            return await call_next(request)
        finally:
            del request.state.injector
