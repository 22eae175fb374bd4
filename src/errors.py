class GenerationError(RuntimeError):
    """A video provider rejected, failed or returned an unusable generation."""


class GenerationTimeout(GenerationError):
    """Polling gave up before the provider finished."""
