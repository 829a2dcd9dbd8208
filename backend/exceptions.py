"""Application errors raised outside the SQL compiler."""


class ErdGenError(Exception):
    """Base class for application-specific errors."""


class LLMConfigurationError(ErdGenError):
    """OPENAI_API_KEY missing or a placeholder."""


class LLMResponseError(ErdGenError):
    """The model answered with nothing usable (empty, not JSON, wrong shape)."""


class InvalidSupabaseURLError(ErdGenError):
    pass


class SupabaseAuthError(ErdGenError):
    """Supabase rejected the supplied key."""


class SupabaseConnectionError(ErdGenError):
    """Supabase could not be reached."""


class GenerationNotFoundError(ErdGenError):
    def __init__(self, generation_id: int):
        super().__init__(f"Generation {generation_id} not found")
        self.generation_id = generation_id
