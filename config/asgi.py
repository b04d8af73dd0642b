"""ASGI entrypoint for OpenClass (HTTP and WebSocket)."""
import os
from django.core.asgi import get_asgi_application
from channels.routing import ProtocolTypeRouter, URLRouter

# Default to development settings for local runs; override in deployment.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

django_asgi_app = get_asgi_application()

# Imported after Django setup: these modules touch models
from accounts.channels_auth import BearerTokenAuthMiddleware  # noqa: E402
from discussions.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        "websocket": BearerTokenAuthMiddleware(URLRouter(websocket_urlpatterns)),
    }
)
