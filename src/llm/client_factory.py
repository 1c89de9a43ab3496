# src/llm/client_factory.py — v3
"""Factory: instantiate a vision gateway from the configured provider name."""

from __future__ import annotations

import importlib
import logging

from lansonesscan.config.settings import Settings
from lansonesscan.llm.base_gateway import BaseVisionGateway

logger = logging.getLogger(__name__)

# Registry of provider name -> gateway class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "google": "lansonesscan.llm.adapters.google_adapter.GoogleGateway",
    "anthropic": "lansonesscan.llm.adapters.anthropic_adapter.AnthropicGateway",
    "openai": "lansonesscan.llm.adapters.openai_adapter.OpenAIGateway",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_gateway(
    settings: Settings,
    provider: str | None = None,
    model: str | None = None,
    **kwargs: object,
) -> BaseVisionGateway:
    """Instantiate the gateway for a provider.

    Args:
        settings: Application settings (API keys, generation parameters).
        provider: Provider identifier. Defaults to settings.llm_provider.
        model: Model name. Defaults to settings.llm_model.
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseVisionGateway instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    provider = provider or settings.llm_provider
    if provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    gateway_cls = _import_class(_PROVIDER_REGISTRY[provider])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model or settings.llm_model
    init_kwargs.setdefault("temperature", settings.llm_temperature)
    init_kwargs.setdefault("max_output_tokens", settings.llm_max_output_tokens)
    init_kwargs.setdefault("top_p", settings.llm_top_p)
    init_kwargs.setdefault("top_k", settings.llm_top_k)

    if provider == "google":
        init_kwargs.setdefault("api_key", settings.google_api_key)
    elif provider == "anthropic":
        init_kwargs.setdefault("api_key", settings.anthropic_api_key)
    elif provider == "openai":
        init_kwargs.setdefault("api_key", settings.openai_api_key)

    logger.debug("Creating gateway: provider=%s, model=%s", provider, init_kwargs["model"])
    return gateway_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom gateway class.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseVisionGateway.
    """
    _PROVIDER_REGISTRY[name] = class_path
    logger.info("Registered gateway provider: %s -> %s", name, class_path)


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
