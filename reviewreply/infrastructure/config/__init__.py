from .settings import Settings, GoogleSettings, LLMSettings, ReplySettings, get_settings
