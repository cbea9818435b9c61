"""Temporal client factory.

Creates connections to Temporal (Cloud or a local dev server) using
settings from the environment.
"""

from temporalio.client import Client

from core.config import Settings, load_settings


async def get_temporal_client(settings: Settings = None) -> Client:
    """Create and return a Temporal client.

    Reads configuration from settings (environment variables):
    - TEMPORAL_ENDPOINT: Temporal endpoint (e.g., "ns.acct.tmprl.cloud:7233" or "localhost:7233")
    - TEMPORAL_NAMESPACE: Namespace (e.g., "default")
    - TEMPORAL_API_KEY: API key for Temporal Cloud (omit for a local server)

    Returns:
        Connected Temporal client

    Raises:
        ValueError: If TEMPORAL_ENDPOINT is missing
    """
    settings = settings or load_settings()

    if not settings.temporal_endpoint:
        raise ValueError(
            "TEMPORAL_ENDPOINT environment variable not set. "
            "Set to your Temporal endpoint (e.g., 'localhost:7233')"
        )

    if settings.temporal_api_key:
        # Temporal Cloud: TLS with the API key as bearer credentials
        return await Client.connect(
            target_host=settings.temporal_endpoint,
            namespace=settings.temporal_namespace,
            tls=True,
            api_key=settings.temporal_api_key,
        )

    return await Client.connect(
        target_host=settings.temporal_endpoint,
        namespace=settings.temporal_namespace,
    )
