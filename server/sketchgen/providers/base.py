from abc import ABC, abstractmethod


class GenerationProvider(ABC):
    """Text-generation backend that turns an instruction into raw SVG text.

    Implementations call the external model exactly once per ``generate``
    and raise :class:`~sketchgen.exceptions.ProviderError` subclasses on
    failure. Retries, if any, belong to whoever calls the pipeline.
    """

    name: str = "provider"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials needed for a call are present."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's raw text for a normalized user prompt."""
