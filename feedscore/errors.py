class FeedScoreError(Exception):
    code: str = "feedscore_error"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message or self.__class__.__name__)
        if code:
            self.code = code


class DataSourceError(FeedScoreError):
    code = "data_source_error"


class ConfigError(FeedScoreError):
    code = "config_error"
