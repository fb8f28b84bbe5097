from contextlib import suppress

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# fmt: off
with suppress(ModuleNotFoundError):
    import dotenv; dotenv.load_dotenv()
# fmt: on


class AnalyzerSettings(BaseSettings):

    total_users: int = Field(default=10000)
    """ Approximate count of active users, baseline for impact percentage """

    default_crash_limit: int = Field(default=10, gt=0)
    """ Count of crash summaries returned when no limit requested """

    top_n: int = Field(default=10, gt=0)
    """ Size of top crashes and device breakdown in trend reports """

    model_config = SettingsConfigDict(env_prefix="CRASH_ANALYZER_")


class AppSettings(BaseModel):
    analyzer: AnalyzerSettings


_app_settings = None


def load_app_settings() -> AppSettings:
    return AppSettings(analyzer=AnalyzerSettings())


def get_app_settings() -> AppSettings:

    global _app_settings

    if _app_settings is None:
        _app_settings = load_app_settings()

    return _app_settings
